"""
Interval polling of the mountstats report.

NfsMonitor owns the only mutable state of a monitoring session: the
"previous" snapshot mapping. Each poll parses a fresh report, computes deltas
against the previous mapping, hands the results to the renderer, the metrics
manager and the recorder, then replaces the previous mapping with the fresh
one.

Shutdown is cooperative: signal handlers only set a threading.Event, which
also interrupts the wait between polls.
"""

import logging
import signal
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Union

from ..display.renderer import StatsRenderer
from ..metrics.prometheus import MetricsManager
from ..models.mountstats import DeltaRecord, MountSnapshot
from ..parsing.parser import DEFAULT_MOUNTSTATS_PATH, list_mount_paths, read_mountstats
from ..stats.delta import (
    calculate_cumulative_stats,
    calculate_delta_stats,
    filter_operations,
)
from ..storage.recorder import DeltaRecorder
from ..validation.exceptions import MountNotFoundError, MountstatsParseError, NfsGazeError

logger = logging.getLogger(__name__)


class NfsMonitor:
    """
    Polls a mountstats report and publishes per-operation statistics.

    Args:
        mountstats_path: Report to read, ``/proc/self/mountstats`` by default
        interval_seconds: Seconds between polls
        mount_point: Only monitor this mount; all NFS mounts when None
        operations_filter: Operation names to keep; empty keeps all
        renderer: Text output; a default stdout renderer when None
        metrics: Metrics fan-out, optional
        recorder: Session recorder, optional
        clock: Monotonic clock used for elapsed time
    """

    def __init__(
        self,
        mountstats_path: Union[str, Path] = DEFAULT_MOUNTSTATS_PATH,
        interval_seconds: float = 1.0,
        mount_point: Optional[str] = None,
        operations_filter: Optional[Set[str]] = None,
        renderer: Optional[StatsRenderer] = None,
        metrics: Optional[MetricsManager] = None,
        recorder: Optional[DeltaRecorder] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.mountstats_path = Path(mountstats_path)
        self.interval_seconds = interval_seconds
        self.mount_point = mount_point
        self.operations_filter = set(operations_filter or ())
        self.renderer = renderer or StatsRenderer()
        self.metrics = metrics
        self.recorder = recorder
        self._clock = clock

        self._shutdown_requested = threading.Event()
        self._original_handlers: Dict[int, Any] = {}
        self.polls_failed = 0

    # --- Shutdown ---

    def request_shutdown(self) -> None:
        """Ask the poll loop to stop after the current poll."""
        self._shutdown_requested.set()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested.is_set()

    def _signal_handler(self, signum: int, frame: Any) -> None:
        logger.info(f"Signal {signum} received, stopping after the current poll")
        self.request_shutdown()

    def install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to request_shutdown. Main thread only."""
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._original_handlers[signum] = signal.signal(signum, self._signal_handler)
        logger.debug("Signal handlers installed")

    def restore_signal_handlers(self) -> None:
        for signum, handler in self._original_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)
        self._original_handlers.clear()

    # --- Polling ---

    @staticmethod
    def select_mounts(mount_point: Optional[str], snapshots: Dict[str, MountSnapshot]) -> List[str]:
        """
        Decide which mounts of a report to monitor.

        Args:
            mount_point: Requested mount path, or None for all mounts
            snapshots: Parsed report

        Returns:
            ``[mount_point]``, or every mount path sorted

        Raises:
            MountNotFoundError: If ``mount_point`` is not in the report
        """
        if mount_point is not None:
            if mount_point not in snapshots:
                raise MountNotFoundError(mount_point)
            return [mount_point]
        return list_mount_paths(snapshots)

    def read_snapshots(self) -> Dict[str, MountSnapshot]:
        return read_mountstats(self.mountstats_path)

    def _filtered(self, records: List[DeltaRecord]) -> List[DeltaRecord]:
        return filter_operations(records, self.operations_filter)

    def _publish(
        self,
        mount: MountSnapshot,
        records: List[DeltaRecord],
        previous: Optional[MountSnapshot],
        timestamp: datetime,
    ) -> None:
        self.renderer.render(mount, records, previous, timestamp)
        if self.metrics is not None:
            self.metrics.publish(mount, records)
        if self.recorder is not None:
            self.recorder.record(mount, records, timestamp)

    def _show_initial(self, snapshots: Dict[str, MountSnapshot], monitored: List[str]) -> None:
        if self.renderer.nfsiostat_format:
            # Statistics accumulated since each mount was created.
            for path in monitored:
                mount = snapshots[path]
                records = self._filtered(calculate_cumulative_stats(mount))
                if records:
                    self.renderer.render(mount, records)
        else:
            self.renderer.print_initial_summary(
                [snapshots[path] for path in monitored],
                self.interval_seconds,
                self.operations_filter,
            )

    def poll_once(
        self,
        previous: Dict[str, MountSnapshot],
        current: Dict[str, MountSnapshot],
        elapsed_seconds: float,
        timestamp: Optional[datetime] = None,
    ) -> Dict[str, List[DeltaRecord]]:
        """
        Compute and publish the deltas of one poll.

        Mounts missing from either mapping are skipped for this poll.

        Returns:
            Filtered delta records per monitored mount path
        """
        timestamp = timestamp or datetime.now()
        results = {}
        paths = [self.mount_point] if self.mount_point is not None else list_mount_paths(current)
        for path in paths:
            mount = current.get(path)
            before = previous.get(path)
            if mount is None or before is None:
                continue
            records = self._filtered(calculate_delta_stats(before, mount, elapsed_seconds))
            self._publish(mount, records, before, timestamp)
            results[path] = records
        return results

    def _close_recorder(self, suppress_errors: bool = False) -> None:
        if self.recorder is None:
            return
        try:
            self.recorder.close()
        except Exception as e:
            if not suppress_errors:
                raise
            logger.error(f"Failed to close recorder {self.recorder.data_path}: {e}", exc_info=True)

    def run(self, count: int = 0) -> int:
        """
        Run the poll loop.

        Args:
            count: Number of polls; 0 polls until shutdown is requested

        Returns:
            Number of polls performed, failed ones included

        Raises:
            OSError: If the report cannot be read initially
            MountstatsParseError: If the initial report is malformed
            MountNotFoundError: If the requested mount is not in the initial report
            NfsGazeError: If the initial report has no NFS mounts
        """
        polls = 0
        try:
            previous = self.read_snapshots()
            monitored = self.select_mounts(self.mount_point, previous)
            if not monitored:
                raise NfsGazeError(f"No NFS mounts found in {self.mountstats_path}")

            self._show_initial(previous, monitored)
            if self.metrics is not None:
                self.metrics.start()

            last_poll = self._clock()
            while not self.shutdown_requested:
                if self._shutdown_requested.wait(self.interval_seconds):
                    break
                polls += 1

                try:
                    current = self.read_snapshots()
                except (OSError, MountstatsParseError) as e:
                    self.polls_failed += 1
                    logger.warning(f"Error reading mountstats, retrying next interval: {e}")
                else:
                    now = self._clock()
                    elapsed, last_poll = now - last_poll, now

                    timestamp = datetime.now()
                    self.renderer.begin_poll(timestamp)
                    self.poll_once(previous, current, elapsed, timestamp)
                    if self.recorder is not None:
                        self.recorder.end_poll()
                    previous = current

                if count > 0 and polls >= count:
                    break
        except BaseException:
            # Never let a failing close mask the error that ended the loop.
            self._close_recorder(suppress_errors=True)
            raise
        self._close_recorder()

        logger.debug(f"Poll loop finished after {polls} polls ({self.polls_failed} failed)")
        return polls
