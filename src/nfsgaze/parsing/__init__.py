"""
Parsing of the kernel's NFS mountstats report.
"""

from .parser import (
    DEFAULT_MOUNTSTATS_PATH,
    LineKind,
    MountstatsParser,
    classify_line,
    list_mount_paths,
    parse_events,
    parse_mountstats_lines,
    parse_mountstats_text,
    parse_operation,
    read_mountstats,
)

__all__ = [
    "DEFAULT_MOUNTSTATS_PATH",
    "LineKind",
    "MountstatsParser",
    "classify_line",
    "list_mount_paths",
    "parse_events",
    "parse_mountstats_lines",
    "parse_mountstats_text",
    "parse_operation",
    "read_mountstats",
]
