"""
Text rendering of per-poll NFS statistics.

Two layouts are supported:

- the simple table (default): one row per operation with IOPS, average RTT,
  average execute time, optional bandwidth columns and the error count;
- the nfsiostat-compatible layout: total ops/s per mount followed by a block
  per operation, optionally with attribute cache statistics.

All output goes to a single text stream (stdout by default) so it can be
captured in tests. Logging never writes to this stream.
"""

import sys
from datetime import datetime
from typing import Iterable, List, Optional, Set, TextIO

from ..models.mountstats import DeltaRecord, MountSnapshot
from ..stats.delta import calculate_event_deltas

CLEAR_SCREEN = "\033[H\033[2J"

SIMPLE_SEPARATOR_WIDTH = 48
BANDWIDTH_SEPARATOR_WIDTH = 72

NFSIOSTAT_COLUMNS = (
    "ops/s",
    "kB/s",
    "kB/op",
    "retrans",
    "avg RTT (ms)",
    "avg exe (ms)",
    "avg queue (ms)",
    "errors",
)


def format_duration(ms: float) -> str:
    """Format a duration already expressed in milliseconds, e.g. ``12.5ms``."""
    if ms == 0:
        return "0.0ms"
    return f"{ms:.1f}ms"


def format_rate(rate: float) -> str:
    """Format a per-second or per-op rate with one decimal."""
    if rate == 0:
        return "0.0"
    return f"{rate:.1f}"


def format_bandwidth(kb_per_sec: float) -> str:
    """Format a KB/s value as MB/s with one decimal."""
    return format_rate(kb_per_sec / 1024.0)


class StatsRenderer:
    """
    Writes monitoring output for one or more mounts.

    Args:
        stream: Output stream, stdout when None
        show_bandwidth: Add MB/s and KB/op columns to the simple table
        show_attr: Print attribute cache statistics (nfsiostat layout)
        nfsiostat_format: Use the nfsiostat-compatible layout
        clear_screen: Clear the terminal before each poll (simple layout)
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        show_bandwidth: bool = False,
        show_attr: bool = False,
        nfsiostat_format: bool = False,
        clear_screen: bool = False,
    ):
        self.stream = stream if stream is not None else sys.stdout
        self.show_bandwidth = show_bandwidth
        self.show_attr = show_attr
        self.nfsiostat_format = nfsiostat_format
        self.clear_screen = clear_screen
        self._header_lines: List[str] = []

    def _write(self, text: str = "") -> None:
        self.stream.write(text + "\n")

    def print_initial_summary(
        self,
        mounts: List[MountSnapshot],
        interval_seconds: float,
        operations_filter: Optional[Set[str]] = None,
    ) -> None:
        """
        Print what is being monitored before the first poll.

        The summary is reprinted after every screen clear.
        """
        lines = []
        for mount in mounts:
            lines.append(f"Monitoring NFS mount: {mount.mount_path} ({mount.device})")
        lines.append(f"Update interval: {interval_seconds:g}s")
        if operations_filter:
            lines.append(f"Filtering operations: {','.join(sorted(operations_filter))}")

        self._header_lines = lines
        for line in lines:
            self._write(line)
        self.stream.flush()

    def begin_poll(self, timestamp: Optional[datetime] = None) -> None:
        """Called once per poll before any mount is rendered."""
        if not self.clear_screen or self.nfsiostat_format:
            return
        timestamp = timestamp or datetime.now()
        self.stream.write(CLEAR_SCREEN)
        for line in self._header_lines:
            self._write(line)
        self._write(f"Time: {timestamp.strftime('%H:%M:%S')}")

    def render(
        self,
        mount: MountSnapshot,
        records: List[DeltaRecord],
        previous: Optional[MountSnapshot] = None,
        timestamp: Optional[datetime] = None,
    ) -> None:
        """
        Render one mount's delta records in the configured layout.

        Args:
            mount: Current snapshot of the mount
            records: Filtered delta records, sorted by operation name
            previous: Earlier snapshot, used for attribute cache statistics
            timestamp: Time of the poll, now when None
        """
        if self.nfsiostat_format:
            self.render_nfsiostat(mount, records, previous)
        else:
            self.render_simple(mount, records, timestamp or datetime.now())
        self.stream.flush()

    def render_simple(self, mount: MountSnapshot, records: List[DeltaRecord], timestamp: datetime) -> None:
        # Idle mounts produce no output in the simple layout.
        if not records:
            return

        self._write(f"{mount.device} mounted on {mount.mount_path}")
        self._write(f"Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        self._write()

        if self.show_bandwidth:
            self._write(
                f"{'OP':<12} {'IOPS':>8} {'RTT(ms)':>8} {'EXE(ms)':>8} "
                f"{'MB/s':>8} {'KB/op':>8} {'ERRORS':>8}"
            )
            self._write("-" * BANDWIDTH_SEPARATOR_WIDTH)
        else:
            self._write(f"{'OP':<12} {'IOPS':>8} {'RTT(ms)':>8} {'EXE(ms)':>8} {'ERRORS':>8}")
            self._write("-" * SIMPLE_SEPARATOR_WIDTH)

        for r in records:
            row = (
                f"{r.operation:<12} {format_rate(r.ops_per_sec):>8} "
                f"{format_duration(r.avg_rtt):>8} {format_duration(r.avg_exec):>8}"
            )
            if self.show_bandwidth:
                row += f" {format_bandwidth(r.kb_per_sec):>8} {format_rate(r.kb_per_op):>8}"
            self._write(f"{row} {r.delta_errors:>8}")

        self._write()

    def render_nfsiostat(
        self,
        mount: MountSnapshot,
        records: Iterable[DeltaRecord],
        previous: Optional[MountSnapshot] = None,
    ) -> None:
        """Render in the nfsiostat layout; printed even when the mount was idle."""
        records = [r for r in records if r.delta_ops != 0]
        total_ops = sum(r.ops_per_sec for r in records)

        self._write()
        self._write(f"{mount.device} mounted on {mount.mount_path}:")
        self._write()
        self._write(f"{'ops/s':>16} {'rpc bklog':>16}")
        # The report carries no backlog counter.
        self._write(f"{total_ops:16.3f} {0.0:16.3f}")
        self._write()

        header = " ".join(f"{column:>16}" for column in NFSIOSTAT_COLUMNS)
        for r in records:
            self._write(f"{r.operation.lower()}:")
            self._write(header)
            self._write(
                f"{r.ops_per_sec:16.3f} {r.kb_per_sec:16.3f} {r.kb_per_op:16.3f} "
                f"{r.delta_timeouts:>8} ({r.timeout_percent:.1f}%) "
                f"{r.avg_rtt:16.3f} {r.avg_exec:16.3f} {r.avg_queue:16.3f} "
                f"{r.delta_errors:>8} ({r.error_percent:.1f}%)"
            )

        if self.show_attr and previous is not None:
            self.render_attr_cache(mount, previous)

    def render_attr_cache(self, mount: MountSnapshot, previous: MountSnapshot) -> None:
        events = calculate_event_deltas(previous, mount)
        if events is None:
            return

        self._write()
        self._write(f"{events.vfs_open} VFS opens")
        self._write(f"{events.inode_revalidate} inoderevalidates (forced GETATTRs)")
        self._write(f"{events.data_invalidate} page cache invalidations")
        self._write(f"{events.attr_invalidate} attribute cache invalidations")
