"""
Unit tests for the mountstats parser.

Covers line classification, the per-section field layouts, multi-mount
reports and the failure modes of malformed lines.
"""

import pytest

from nfsgaze.models import EventCounters
from nfsgaze.parsing import (
    LineKind,
    classify_line,
    parse_events,
    parse_mountstats_lines,
    parse_mountstats_text,
    parse_operation,
    read_mountstats,
)
from nfsgaze.validation import (
    FieldParseError,
    InsufficientTokensError,
    MountstatsParseError,
    NfsGazeError,
)

DEVICE_LINE = "device server:/export mounted on /mnt/nfs with fstype nfs statvers=1.1"


@pytest.mark.unit
class TestClassifyLine:
    """Test cases for line classification."""

    @pytest.mark.parametrize(
        "line, kind",
        [
            (DEVICE_LINE, LineKind.DEVICE),
            ("device proc mounted on /proc with fstype proc", LineKind.OTHER_DEVICE),
            ("age:\t3600", LineKind.AGE),
            ("events:\t1 2 3", LineKind.EVENTS),
            ("bytes:\t1 2 3 4 5 6", LineKind.BYTES),
            ("READ: 1 2 3 4 5 6 7 8", LineKind.OPERATION),
            ("RPC iostats version: 1.1  p/v: 100003/3 (nfs)", LineKind.IGNORED),
            ("xprt:\ttcp 0 1 2", LineKind.IGNORED),
            ("opts:\trw,vers=3", LineKind.IGNORED),
            ("caps:\tcaps=0x3fef", LineKind.IGNORED),
            ("sec:\tflavor=1", LineKind.IGNORED),
            ("nfsv4:\tbm0=0xfdffafff", LineKind.IGNORED),
            ("impl_id:\tname='',domain='',date='0,0'", LineKind.IGNORED),
            ("fsc:\t0 0 0", LineKind.IGNORED),
            ("per-op statistics", LineKind.IGNORED),
            ("", LineKind.IGNORED),
        ],
    )
    def test_classification(self, line, kind):
        """Each section prefix maps to its line kind."""
        assert classify_line(line) is kind

    def test_device_without_on_is_not_a_header(self):
        """A device line needs ' on ' to open an NFS block."""
        assert classify_line("device server:/export nfs") is LineKind.OTHER_DEVICE


@pytest.mark.unit
class TestParseSections:
    """Test cases for the positional section parsers."""

    def test_operation_with_errors(self):
        """A nine-counter operation line fills every field."""
        op = parse_operation("READ", "100 95 5 1024 2048 10 20 30 2".split())

        assert op.name == "READ"
        assert op.ops == 100
        assert op.ntrans == 95
        assert op.timeouts == 5
        assert op.bytes_sent == 1024
        assert op.bytes_recv == 2048
        assert op.queue_time == 10
        assert op.rtt == 20
        assert op.execute_time == 30
        assert op.errors == 2

    def test_operation_without_errors(self):
        """The errors counter defaults to 0 on eight-counter lines."""
        op = parse_operation("WRITE", "1 1 0 10 20 1 2 3".split())
        assert op.errors == 0
        assert op.execute_time == 3

    def test_operation_insufficient_tokens(self):
        """Fewer than eight counters fails naming the operation and counts."""
        with pytest.raises(InsufficientTokensError) as exc_info:
            parse_operation("READ", "1 2 3 4 5 6 7".split())

        err = exc_info.value
        assert err.operation == "READ"
        assert err.actual == 7
        assert err.required == 8
        assert "READ" in str(err)

    def test_operation_non_numeric_token(self):
        """A non-integer counter identifies the operation and field."""
        with pytest.raises(FieldParseError) as exc_info:
            parse_operation("READ", "1 2 x 4 5 6 7 8".split())

        assert exc_info.value.field == "READ.timeouts"
        assert exc_info.value.value == "x"

    def test_events_full(self):
        """27 event counters fill the pNFS fields."""
        events = parse_events([str(i) for i in range(1, 28)])

        assert events.inode_revalidate == 1
        assert events.vfs_open == 5
        assert events.delay == 25
        assert events.pnfs_read == 26
        assert events.pnfs_write == 27

    def test_events_without_pnfs(self):
        """25 event counters leave the pNFS fields at 0."""
        events = parse_events([str(i) for i in range(1, 26)])

        assert events.delay == 25
        assert events.pnfs_read == 0
        assert events.pnfs_write == 0

    def test_events_too_few(self):
        """Fewer than 25 event counters is a malformed events section."""
        with pytest.raises(MountstatsParseError) as exc_info:
            parse_events([str(i) for i in range(1, 25)])
        assert exc_info.value.line_kind == "events"


@pytest.mark.unit
class TestParseReport:
    """Test cases for whole-report parsing."""

    def test_sample_report(self, sample_mountstats):
        """The sample report yields both NFS mounts and skips the others."""
        mounts = parse_mountstats_text(sample_mountstats)

        assert sorted(mounts) == ["/mnt/data", "/mnt/nfs"]

        nfs = mounts["/mnt/nfs"]
        assert nfs.device == "server:/export"
        assert nfs.server == "server"
        assert nfs.export == "/export"
        assert nfs.age == 3600
        assert nfs.bytes_read == 1048576
        assert nfs.bytes_write == 2097152
        assert isinstance(nfs.events, EventCounters)
        assert nfs.events.pnfs_write == 27
        assert set(nfs.operations) == {"NULL", "GETATTR", "READ", "WRITE"}
        assert nfs.operations["READ"].errors == 2

        data = mounts["/mnt/data"]
        assert data.server == "nfsserver2"
        assert data.export == "/data"
        assert data.age == 60
        assert data.events is None
        assert data.operations["READ"].errors == 0

    def test_parsing_is_idempotent(self, sample_mountstats):
        """Parsing the same text twice gives equal results."""
        assert parse_mountstats_text(sample_mountstats) == parse_mountstats_text(sample_mountstats)

    def test_empty_input(self):
        """A report without NFS mounts gives an empty mapping."""
        assert parse_mountstats_lines([]) == {}
        assert parse_mountstats_text("device proc mounted on /proc with fstype proc\n") == {}

    def test_lines_before_first_device_are_ignored(self):
        """Stat lines outside of an NFS block are skipped."""
        mounts = parse_mountstats_lines(["age: 5", "READ: x", DEVICE_LINE, "age: 7"])
        assert mounts["/mnt/nfs"].age == 7

    def test_non_nfs_device_closes_block(self):
        """Stat lines after a non-NFS header do not reach the previous mount."""
        mounts = parse_mountstats_lines([
            DEVICE_LINE,
            "age: 7",
            "device proc mounted on /proc with fstype proc",
            "age: 99",
            "READ: 1 1 0 0 0 0 0 0",
        ])
        assert mounts["/mnt/nfs"].age == 7
        assert mounts["/mnt/nfs"].operations == {}

    def test_device_without_colon(self):
        """A device without a colon is all server, with export '/'."""
        mounts = parse_mountstats_lines(["device nfshost mounted on /mnt/x with fstype nfs"])
        mount = mounts["/mnt/x"]
        assert mount.server == "nfshost"
        assert mount.export == "/"

    def test_sections_never_seen_stay_zero(self):
        """A bare device header gives a zeroed mount."""
        mount = parse_mountstats_lines([DEVICE_LINE])["/mnt/nfs"]
        assert mount.age == 0
        assert mount.bytes_read == 0
        assert mount.bytes_write == 0
        assert mount.operations == {}
        assert mount.events is None

    def test_bytes_write_falls_back_when_token_six_is_zero(self):
        """A literal "0" at token 6 (label is token 0) selects token 5."""
        mounts = parse_mountstats_lines([DEVICE_LINE, "bytes: 10 0 0 0 555 0 0 0"])
        assert mounts["/mnt/nfs"].bytes_write == 555

    def test_bytes_write_prefers_token_six(self):
        mounts = parse_mountstats_lines([DEVICE_LINE, "bytes: 10 0 0 0 0 777 0 0"])
        assert mounts["/mnt/nfs"].bytes_write == 777

    def test_bytes_write_ignores_token_seven(self):
        mounts = parse_mountstats_lines([DEVICE_LINE, "bytes: 10 0 0 0 0 555 777 0"])
        assert mounts["/mnt/nfs"].bytes_write == 555

    def test_bytes_with_six_tokens(self):
        mounts = parse_mountstats_lines([DEVICE_LINE, "bytes: 10 0 0 0 555"])
        assert mounts["/mnt/nfs"].bytes_read == 10
        assert mounts["/mnt/nfs"].bytes_write == 555

    def test_later_operation_line_wins(self):
        """A repeated operation name replaces the earlier counters."""
        mounts = parse_mountstats_lines([
            DEVICE_LINE,
            "READ: 1 1 0 0 0 0 0 0",
            "READ: 2 2 0 0 0 0 0 0",
        ])
        assert mounts["/mnt/nfs"].operations["READ"].ops == 2


@pytest.mark.unit
class TestParseFailures:
    """Malformed lines abort the parse."""

    @pytest.mark.parametrize(
        "line, line_kind",
        [
            ("age:", "age"),
            ("events:", "events"),
            ("bytes: 1 2 3 4", "bytes"),
        ],
    )
    def test_malformed_sections(self, line, line_kind):
        with pytest.raises(MountstatsParseError) as exc_info:
            parse_mountstats_lines([DEVICE_LINE, line])
        assert exc_info.value.line_kind == line_kind

    def test_malformed_device_line(self):
        """A header without a device token is malformed."""
        with pytest.raises(MountstatsParseError) as exc_info:
            parse_mountstats_lines(["device on /mnt nfs"])
        assert exc_info.value.line_kind == "device"

    def test_non_numeric_age(self):
        with pytest.raises(FieldParseError) as exc_info:
            parse_mountstats_lines([DEVICE_LINE, "age: soon"])
        assert exc_info.value.field == "age"

    def test_non_numeric_bytes(self):
        with pytest.raises(FieldParseError) as exc_info:
            parse_mountstats_lines([DEVICE_LINE, "bytes: 1x 0 0 0 0 0 0 0"])
        assert exc_info.value.field == "bytes_read"

    def test_short_operation_line_in_report(self):
        with pytest.raises(InsufficientTokensError):
            parse_mountstats_lines([DEVICE_LINE, "READ: 1 2 3"])

    def test_errors_share_a_base_class(self):
        """All parse failures are NfsGazeError subclasses."""
        assert issubclass(FieldParseError, MountstatsParseError)
        assert issubclass(InsufficientTokensError, MountstatsParseError)
        assert issubclass(MountstatsParseError, NfsGazeError)

    def test_field_error_chains_value_error(self):
        """The failed conversion is chained as the cause."""
        with pytest.raises(FieldParseError) as exc_info:
            parse_mountstats_lines([DEVICE_LINE, "age: 1.5"])
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "1.5" in str(exc_info.value)


@pytest.mark.unit
class TestReadMountstats:
    """Test cases for reading reports from disk."""

    def test_read_file(self, mountstats_file):
        mounts = read_mountstats(mountstats_file)
        assert "/mnt/nfs" in mounts
        assert mounts["/mnt/nfs"].operations["GETATTR"].rtt == 25

    def test_missing_file(self, temp_dir):
        with pytest.raises(OSError):
            read_mountstats(temp_dir / "does_not_exist")
