"""
Unit tests for the DeltaRecorder session writer.
"""

import json
from datetime import datetime

import polars as pl
import pytest

from nfsgaze.config import StorageConfig
from nfsgaze.models import MountSnapshot, OperationCounters
from nfsgaze.stats import calculate_delta_stats
from nfsgaze.storage import ROW_SCHEMA, DeltaRecorder, default_session_name


def make_records(ops):
    previous = MountSnapshot.from_device("server:/export", "/mnt/nfs")
    current = MountSnapshot.from_device("server:/export", "/mnt/nfs")
    current.operations = {
        name: OperationCounters(name=name, ops=count, bytes_recv=count * 1024, rtt=count * 2)
        for name, count in ops.items()
    }
    return current, calculate_delta_stats(previous, current, 1.0)


@pytest.mark.unit
class TestDeltaRecorder:
    """Test cases for DeltaRecorder."""

    def test_session_paths(self, temp_dir):
        recorder = DeltaRecorder(temp_dir, session_name="run1")

        assert recorder.data_path == temp_dir / "run1.parquet"
        assert recorder.metadata_path == temp_dir / "run1_metadata.json"

    def test_default_session_name(self):
        assert default_session_name(datetime(2024, 5, 1, 12, 30, 45)) == "nfsgaze_20240501_123045"

    def test_rows_buffered_until_flush_every(self, temp_dir):
        recorder = DeltaRecorder(temp_dir, StorageConfig(flush_every=2), session_name="s")
        mount, records = make_records({"READ": 10, "WRITE": 5})

        recorder.record(mount, records, datetime(2024, 1, 1, 0, 0, 1))
        recorder.end_poll()

        assert recorder.pending_rows == 2
        assert not recorder.data_path.exists()

        recorder.record(mount, records, datetime(2024, 1, 1, 0, 0, 2))
        recorder.end_poll()

        assert recorder.pending_rows == 0
        assert recorder.rows_written == 4
        assert recorder.data_path.exists()

    def test_written_rows(self, temp_dir):
        recorder = DeltaRecorder(temp_dir, session_name="s")
        mount, records = make_records({"READ": 10})
        timestamp = datetime(2024, 1, 1, 0, 0, 1)

        recorder.record(mount, records, timestamp)
        recorder.end_poll()
        recorder.close()

        df = pl.read_parquet(recorder.data_path)
        assert df.columns == list(ROW_SCHEMA)
        row = df.row(0, named=True)
        assert row["timestamp"] == timestamp
        assert row["mount_path"] == "/mnt/nfs"
        assert row["server"] == "server"
        assert row["export"] == "/export"
        assert row["operation"] == "READ"
        assert row["delta_ops"] == 10
        assert row["avg_rtt"] == 2.0
        assert row["kb_per_op"] == 1.0

    def test_close_writes_metadata(self, temp_dir):
        recorder = DeltaRecorder(temp_dir, session_name="s", metadata={"interval_seconds": 1.0})
        mount, records = make_records({"READ": 10})
        recorder.record(mount, records, datetime.now())
        recorder.end_poll()

        recorder.close()
        recorder.close()

        metadata = json.loads(recorder.metadata_path.read_text())
        assert metadata["session_name"] == "s"
        assert metadata["polls"] == 1
        assert metadata["rows_written"] == 1
        assert metadata["mounts"] == {"/mnt/nfs": "server:/export"}
        assert metadata["interval_seconds"] == 1.0
        assert recorder.closed

    def test_close_without_rows(self, temp_dir):
        recorder = DeltaRecorder(temp_dir, session_name="empty")
        recorder.close()

        assert not recorder.data_path.exists()
        assert recorder.metadata_path.exists()
