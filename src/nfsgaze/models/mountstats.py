"""
Record types for NFS mount statistics.

This module defines the plain data contracts shared by the parser, the delta
engine, the renderer and the exporters:

- OperationCounters: cumulative per-operation RPC counters of one mount
- EventCounters: the optional block of VFS/cache event counters
- MountSnapshot: one NFS mount at one point in time
- DeltaRecord: per-operation rates derived from two snapshots

All time counters are kept in the report's native integer unit, which the
kernel reports in milliseconds.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional, Tuple


@dataclass
class OperationCounters:
    """
    Cumulative counters for one RPC operation type on one mount.

    Values are parsed from a per-op line of the mountstats report, e.g.
    ``READ: 100 95 5 1024 2048 10 20 30 2``.
    """

    name: str
    ops: int = 0
    # Transmissions, i.e. ops plus retransmits.
    ntrans: int = 0
    timeouts: int = 0
    bytes_sent: int = 0
    bytes_recv: int = 0
    queue_time: int = 0
    rtt: int = 0
    execute_time: int = 0
    # Only present in newer report versions.
    errors: int = 0

    @classmethod
    def zero(cls, name: str) -> "OperationCounters":
        """Baseline used for an operation not present in the previous snapshot."""
        return cls(name=name)


# Positional layout of the "events:" line, in report order.
EVENT_FIELDS: Tuple[str, ...] = (
    "inode_revalidate",
    "dentry_revalidate",
    "data_invalidate",
    "attr_invalidate",
    "vfs_open",
    "vfs_lookup",
    "vfs_access",
    "vfs_update_page",
    "vfs_read_page",
    "vfs_read_pages",
    "vfs_write_page",
    "vfs_write_pages",
    "vfs_getdents",
    "vfs_setattr",
    "vfs_flush",
    "vfs_fsync",
    "vfs_lock",
    "vfs_release",
    "congestion_wait",
    "setattr_trunc",
    "extend_write",
    "silly_rename",
    "short_read",
    "short_write",
    "delay",
    "pnfs_read",
    "pnfs_write",
)

# The trailing pNFS counters are optional.
REQUIRED_EVENT_FIELDS = 25


@dataclass
class EventCounters:
    """
    Cumulative VFS and cache event counters of one mount.

    The first 25 counters are always present when the report carries an
    ``events:`` line; ``pnfs_read`` and ``pnfs_write`` default to 0 on
    kernels that do not report them.
    """

    inode_revalidate: int = 0
    dentry_revalidate: int = 0
    data_invalidate: int = 0
    attr_invalidate: int = 0
    vfs_open: int = 0
    vfs_lookup: int = 0
    vfs_access: int = 0
    vfs_update_page: int = 0
    vfs_read_page: int = 0
    vfs_read_pages: int = 0
    vfs_write_page: int = 0
    vfs_write_pages: int = 0
    vfs_getdents: int = 0
    vfs_setattr: int = 0
    vfs_flush: int = 0
    vfs_fsync: int = 0
    vfs_lock: int = 0
    vfs_release: int = 0
    congestion_wait: int = 0
    setattr_trunc: int = 0
    extend_write: int = 0
    silly_rename: int = 0
    short_read: int = 0
    short_write: int = 0
    delay: int = 0
    pnfs_read: int = 0
    pnfs_write: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class MountSnapshot:
    """
    One NFS mount at one point in time.

    The parser creates the snapshot when it sees the mount's device header and
    fills in the remaining fields as the mount's stat lines arrive. Sections the
    report never mentions keep their zero/absent defaults.
    """

    # "server:/export" as printed in the device header.
    device: str
    mount_path: str
    server: str
    export: str
    # Seconds since the mount was created.
    age: int = 0
    operations: Dict[str, OperationCounters] = field(default_factory=dict)
    # None when the report carries no "events:" line for this mount.
    events: Optional[EventCounters] = None
    bytes_read: int = 0
    bytes_write: int = 0

    @classmethod
    def from_device(cls, device: str, mount_path: str) -> "MountSnapshot":
        """
        Create an empty snapshot, deriving server and export from the device string.

        The device is split on the first colon; without a colon the whole
        string is the server and the export defaults to ``/``.

        Args:
            device: Device string from the report, e.g. ``server:/export``
            mount_path: Local mount point path

        Returns:
            A zeroed MountSnapshot
        """
        server, sep, export = device.partition(":")
        return cls(
            device=device,
            mount_path=mount_path,
            server=server,
            export=export if sep else "/",
        )

    def empty_baseline(self) -> "MountSnapshot":
        """Return a zeroed snapshot of the same mount (no operations, no events)."""
        return MountSnapshot(
            device=self.device,
            mount_path=self.mount_path,
            server=self.server,
            export=self.export,
        )


@dataclass(frozen=True)
class DeltaRecord:
    """
    Per-operation statistics between two snapshots of the same mount.

    Raw deltas may be negative when a counter went backwards (the mount was
    recreated); derived averages are 0.0 whenever ``delta_ops`` is not positive
    and rates are 0.0 whenever the elapsed time is not positive.
    """

    operation: str
    delta_ops: int
    delta_bytes_sent: int
    delta_bytes_recv: int
    delta_bytes: int
    delta_rtt: int
    delta_exec: int
    delta_queue: int
    delta_errors: int
    delta_timeouts: int
    ops_per_sec: float
    avg_rtt: float
    avg_exec: float
    avg_queue: float
    kb_per_op: float
    kb_per_sec: float

    @property
    def error_percent(self) -> float:
        if self.delta_ops <= 0:
            return 0.0
        return self.delta_errors / self.delta_ops * 100

    @property
    def timeout_percent(self) -> float:
        if self.delta_ops <= 0:
            return 0.0
        return self.delta_timeouts / self.delta_ops * 100

    def to_dict(self) -> Dict[str, Any]:
        """Flatten the record into a row suitable for a DataFrame."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
