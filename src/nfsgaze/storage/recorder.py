"""
Recording of delta records to a session file.

A session is written as two files in the output directory:

- ``<session>.parquet``: one row per (poll, mount, operation)
- ``<session>_metadata.json``: what was monitored and how

Rows are buffered in memory and appended to the Parquet file every
``flush_every`` polls, and once more when the recorder is closed.
"""

import logging
from dataclasses import fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl

from ..config.storage_config import StorageConfig
from ..models.mountstats import DeltaRecord, MountSnapshot
from .base import DataStorage
from .factory import create_storage_from_config

logger = logging.getLogger(__name__)

_POLARS_TYPES = {int: pl.Int64, float: pl.Float64, str: pl.Utf8}

# Columns identifying the poll and the mount, followed by every DeltaRecord field.
ROW_SCHEMA: Dict[str, Any] = {
    "timestamp": pl.Datetime("us"),
    "mount_path": pl.Utf8,
    "server": pl.Utf8,
    "export": pl.Utf8,
    **{f.name: _POLARS_TYPES[f.type] for f in fields(DeltaRecord)},
}


def default_session_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return now.strftime("nfsgaze_%Y%m%d_%H%M%S")


class DeltaRecorder:
    """
    Buffers delta records and writes them to a Parquet session file.

    Args:
        output_dir: Directory receiving the session files
        storage_config: Compression and flush settings
        session_name: Base name of the session files; derived from the start time when None
        metadata: Extra values stored in the metadata sidecar
        storage: Backend override, mainly for tests
    """

    def __init__(
        self,
        output_dir: Path,
        storage_config: Optional[StorageConfig] = None,
        session_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        storage: Optional[DataStorage] = None,
    ):
        self.storage_config = storage_config or StorageConfig()
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.started_at = datetime.now()
        self.session_name = session_name or default_session_name(self.started_at)
        self.data_path = self.output_dir / f"{self.session_name}.parquet"
        self.metadata_path = self.output_dir / f"{self.session_name}_metadata.json"

        self.storage = storage or create_storage_from_config(self.storage_config)
        self.metadata = dict(metadata or {})

        self._rows: List[Dict[str, Any]] = []
        self._mounts: Dict[str, str] = {}
        self._polls_since_flush = 0
        self.polls = 0
        self.rows_written = 0
        self.closed = False

        logger.info(f"Recording delta records to {self.data_path}")

    @property
    def pending_rows(self) -> int:
        return len(self._rows)

    def record(self, mount: MountSnapshot, records: List[DeltaRecord], timestamp: datetime) -> None:
        """Buffer one mount's delta records of the current poll."""
        self._mounts[mount.mount_path] = mount.device
        for record in records:
            row = {
                "timestamp": timestamp,
                "mount_path": mount.mount_path,
                "server": mount.server,
                "export": mount.export,
            }
            row.update(record.to_dict())
            self._rows.append(row)

    def end_poll(self) -> None:
        """Mark the end of a poll; flushes once ``flush_every`` polls are buffered."""
        self.polls += 1
        self._polls_since_flush += 1
        if self._polls_since_flush >= self.storage_config.flush_every:
            self.flush()

    def flush(self) -> None:
        """Append all buffered rows to the session file."""
        self._polls_since_flush = 0
        if not self._rows:
            return

        df = pl.from_dicts(self._rows, schema=ROW_SCHEMA)
        self.storage.append_dataframe(df, str(self.data_path))
        self.rows_written += len(df)
        self._rows.clear()
        logger.debug(f"Flushed {len(df)} rows to {self.data_path} ({self.rows_written} total)")

    def write_metadata(self) -> Dict[str, Any]:
        """Write the metadata sidecar and return its content."""
        content = {
            "session_name": self.session_name,
            "started_at": self.started_at.isoformat(timespec="seconds"),
            "ended_at": datetime.now().isoformat(timespec="seconds"),
            "polls": self.polls,
            "rows_written": self.rows_written,
            "storage": self.storage_config.to_dict(),
            "data_file": self.data_path.name,
            "mounts": dict(sorted(self._mounts.items())),
        }
        content.update(self.metadata)
        self.storage.save_dict(content, str(self.metadata_path))
        return content

    def close(self) -> None:
        """Flush remaining rows and write the metadata sidecar. Safe to call twice."""
        if self.closed:
            return
        self.flush()
        self.write_metadata()
        self.closed = True
        logger.info(
            f"Recorded {self.rows_written} rows over {self.polls} polls to {self.data_path}"
        )
