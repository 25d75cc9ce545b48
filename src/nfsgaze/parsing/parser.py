"""
Parser for the kernel's NFS mountstats report.

``/proc/self/mountstats`` describes every mount of the process's namespace.
NFS mounts are followed by a block of indented statistic lines::

    device server:/export mounted on /mnt/nfs with fstype nfs statvers=1.1
        opts:   rw,vers=3,rsize=1048576,...
        age:    12345
        caps:   caps=0x3fef,wtmult=4096,...
        sec:    flavor=1,pseudoflavor=1
        events: 1 2 3 ... 27
        bytes:  1048576 0 0 0 0 2097152 0 0
        RPC iostats version: 1.1  p/v: 100003/3 (nfs)
        xprt:   tcp 0 1 2 0 0 ...
        per-op statistics
                NULL: 0 0 0 0 0 0 0 0
                READ: 100 95 5 1024 2048 10 20 30 2

The parser is a single-pass state machine: every line is classified into a
LineKind and dispatched to a handler that updates the mount currently open.
Positional fields are parsed from the EVENT_FIELDS and OPERATION_FIELDS tables.
Any malformed line aborts the whole parse; no partial mapping is returned.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..models.mountstats import (
    EVENT_FIELDS,
    REQUIRED_EVENT_FIELDS,
    EventCounters,
    MountSnapshot,
    OperationCounters,
)
from ..validation.exceptions import (
    FieldParseError,
    InsufficientTokensError,
    MountstatsParseError,
)

logger = logging.getLogger(__name__)

# --- Module Constants ---

DEFAULT_MOUNTSTATS_PATH = Path("/proc/self/mountstats")

# Lines of an NFS block that contain a colon but are not per-op statistics.
RESERVED_PREFIXES = (
    "RPC",
    "xprt",
    "per-op",
    "opts",
    "caps",
    "sec",
    "nfsv4",
    "nfsv3",
    # NFSv4.1 implementation id and FS-Cache statistics.
    "impl_id",
    "fsc",
)

# Positional layout of a per-op statistics line; "errors" is optional.
OPERATION_FIELDS = (
    "ops",
    "ntrans",
    "timeouts",
    "bytes_sent",
    "bytes_recv",
    "queue_time",
    "rtt",
    "execute_time",
    "errors",
)
REQUIRED_OPERATION_FIELDS = 8

# A "bytes:" line needs the label plus at least five counters.
REQUIRED_BYTES_TOKENS = 6

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class LineKind(Enum):
    """Classification of a single (stripped) report line."""

    DEVICE = "device"
    # Header of a non-NFS mount; closes the block of the current NFS mount.
    OTHER_DEVICE = "other_device"
    AGE = "age"
    EVENTS = "events"
    BYTES = "bytes"
    OPERATION = "operation"
    IGNORED = "ignored"


def is_nfs_device_header(line: str) -> bool:
    """Check whether a stripped line opens an NFS mount block."""
    return line.startswith("device") and "nfs" in line and " on " in line


def classify_line(line: str) -> LineKind:
    """
    Classify a stripped mountstats line.

    The checks run in priority order: device header, the fixed ``age:``,
    ``events:`` and ``bytes:`` sections, then any remaining line with a colon
    that does not start with a reserved section prefix is an operation line.

    Args:
        line: A report line with surrounding whitespace removed

    Returns:
        The LineKind of the line
    """
    if is_nfs_device_header(line):
        return LineKind.DEVICE
    if line.startswith("device "):
        return LineKind.OTHER_DEVICE
    if line.startswith("age:"):
        return LineKind.AGE
    if line.startswith("events:"):
        return LineKind.EVENTS
    if line.startswith("bytes:"):
        return LineKind.BYTES
    if ":" in line and not line.startswith(RESERVED_PREFIXES):
        return LineKind.OPERATION
    return LineKind.IGNORED


def _parse_int(token: str, field: str, line_kind: str, line: Optional[str] = None) -> int:
    """Convert one token to an integer, raising a field-identifying error on failure."""
    try:
        if not _INTEGER_RE.fullmatch(token):
            raise ValueError(f"invalid literal for int() with base 10: {token!r}")
        return int(token)
    except ValueError as e:
        raise FieldParseError(field, token, line_kind=line_kind, line=line, reason=e) from e


def parse_events(tokens: Sequence[str], line: Optional[str] = None) -> EventCounters:
    """
    Parse the counters of an ``events:`` line.

    Args:
        tokens: The whitespace-separated counters, without the ``events:`` label
        line: Original line, attached to errors

    Returns:
        EventCounters; the pNFS counters are 0 when the report omits them

    Raises:
        MountstatsParseError: If fewer than 25 counters are present
        FieldParseError: If a counter is not an integer
    """
    if len(tokens) < REQUIRED_EVENT_FIELDS:
        raise MountstatsParseError(
            f"Invalid number of parts for events: {len(tokens)} (need at least {REQUIRED_EVENT_FIELDS})",
            line_kind="events",
            line=line,
        )

    values = {
        name: _parse_int(token, name, "events", line)
        for name, token in zip(EVENT_FIELDS, tokens)
    }
    return EventCounters(**values)


def parse_operation(name: str, tokens: Sequence[str], line: Optional[str] = None) -> OperationCounters:
    """
    Parse the counters of one per-op statistics line.

    Args:
        name: Operation name, e.g. ``READ``
        tokens: The whitespace-separated counters after the colon
        line: Original line, attached to errors

    Returns:
        OperationCounters; ``errors`` is 0 when the ninth counter is absent

    Raises:
        InsufficientTokensError: If fewer than 8 counters are present
        FieldParseError: If a counter is not an integer
    """
    if len(tokens) < REQUIRED_OPERATION_FIELDS:
        raise InsufficientTokensError(name, len(tokens), REQUIRED_OPERATION_FIELDS, line=line)

    values = {
        field: _parse_int(token, f"{name}.{field}", "operation", line)
        for field, token in zip(OPERATION_FIELDS, tokens)
    }
    return OperationCounters(name=name, **values)


class MountstatsParser:
    """
    Line-oriented state machine over a mountstats report.

    A parser instance is single-use: create one per report, or call the
    module-level ``parse_mountstats_lines`` helper.
    """

    def __init__(self):
        self.mounts: Dict[str, MountSnapshot] = {}
        self.current: Optional[MountSnapshot] = None
        self._handlers: Dict[LineKind, Callable[[str], None]] = {
            LineKind.DEVICE: self._handle_device,
            LineKind.OTHER_DEVICE: self._handle_other_device,
            LineKind.AGE: self._handle_age,
            LineKind.EVENTS: self._handle_events,
            LineKind.BYTES: self._handle_bytes,
            LineKind.OPERATION: self._handle_operation,
        }

    def parse(self, lines: Iterable[str]) -> Dict[str, MountSnapshot]:
        """
        Parse a complete report.

        Args:
            lines: Report lines; surrounding whitespace and newlines are ignored

        Returns:
            Mapping of mount path to MountSnapshot

        Raises:
            MountstatsParseError: If any line violates its section's shape
        """
        for line in lines:
            self.feed(line)
        return self.mounts

    def feed(self, raw_line: str) -> None:
        """Process one line of the report."""
        line = raw_line.strip()
        kind = classify_line(line)

        # Only a device header is meaningful outside of an NFS block.
        if self.current is None and kind is not LineKind.DEVICE:
            return

        handler = self._handlers.get(kind)
        if handler is not None:
            handler(line)

    def _handle_device(self, line: str) -> None:
        head, _, tail = line.partition(" on ")
        device_tokens = head.split()
        mount_tokens = tail.split()
        if len(device_tokens) < 2 or not mount_tokens:
            raise MountstatsParseError(f"Invalid device line: {line}", line_kind="device", line=line)

        mount = MountSnapshot.from_device(device_tokens[1], mount_tokens[0])
        # Registered immediately; later lines update the same object in place.
        self.mounts[mount.mount_path] = mount
        self.current = mount

    def _handle_other_device(self, line: str) -> None:
        self.current = None

    def _handle_age(self, line: str) -> None:
        tokens = line.split()
        if len(tokens) < 2:
            raise MountstatsParseError(f"Invalid age line: {line}", line_kind="age", line=line)
        self.current.age = _parse_int(tokens[1], "age", "age", line)

    def _handle_events(self, line: str) -> None:
        tokens = line.split()
        if len(tokens) < 2:
            raise MountstatsParseError(f"Invalid events line: {line}", line_kind="events", line=line)
        self.current.events = parse_events(tokens[1:], line)

    def _handle_bytes(self, line: str) -> None:
        tokens = line.split()
        if len(tokens) < REQUIRED_BYTES_TOKENS:
            raise MountstatsParseError(f"Invalid bytes line: {line}", line_kind="bytes", line=line)

        self.current.bytes_read = _parse_int(tokens[1], "bytes_read", "bytes", line)
        # Report versions disagree on where the written byte count lives:
        # prefer tokens[6] unless it is missing or "0", else tokens[5].
        if len(tokens) > 6 and tokens[6] != "0":
            self.current.bytes_write = _parse_int(tokens[6], "bytes_write", "bytes", line)
        elif len(tokens) > 5:
            self.current.bytes_write = _parse_int(tokens[5], "bytes_write", "bytes", line)
        else:
            self.current.bytes_write = 0

    def _handle_operation(self, line: str) -> None:
        name, _, counters = line.partition(":")
        name = name.strip()
        self.current.operations[name] = parse_operation(name, counters.split(), line)


def parse_mountstats_lines(lines: Iterable[str]) -> Dict[str, MountSnapshot]:
    """
    Parse report lines into a mapping of mount path to MountSnapshot.

    Args:
        lines: Iterable of report lines (e.g. an open file or ``str.splitlines()``)

    Returns:
        Mapping of mount path to MountSnapshot; empty if the report has no NFS mounts

    Raises:
        MountstatsParseError: If any line violates its section's shape
    """
    return MountstatsParser().parse(lines)


def parse_mountstats_text(text: str) -> Dict[str, MountSnapshot]:
    """Parse a complete report held in memory."""
    return parse_mountstats_lines(text.splitlines())


def read_mountstats(path: Union[str, Path] = DEFAULT_MOUNTSTATS_PATH) -> Dict[str, MountSnapshot]:
    """
    Read and parse a mountstats file.

    Args:
        path: Path of the report, ``/proc/self/mountstats`` by default

    Returns:
        Mapping of mount path to MountSnapshot

    Raises:
        OSError: If the file cannot be read
        MountstatsParseError: If the report is malformed
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        mounts = parse_mountstats_lines(f)
    logger.debug(f"Parsed {len(mounts)} NFS mount(s) from {path}")
    return mounts


def list_mount_paths(mounts: Dict[str, MountSnapshot]) -> List[str]:
    """Mount paths of a parsed report, sorted for stable output."""
    return sorted(mounts)
