"""
Delta and rate engine for mount snapshots.

Two snapshots of the same mount plus the elapsed time between them yield one
DeltaRecord per operation that saw activity. The functions here are pure and
never raise: zero or negative elapsed time and zero operation deltas produce
0.0 rates instead of errors.
"""

from dataclasses import fields
from typing import Dict, Iterable, List, Optional, Set

from ..models.mountstats import (
    DeltaRecord,
    EventCounters,
    MountSnapshot,
    OperationCounters,
)

BYTES_PER_KB = 1024.0


def _per_op(value: int, delta_ops: int) -> float:
    return value / delta_ops if delta_ops > 0 else 0.0


def _per_sec(value: float, elapsed_seconds: float) -> float:
    return value / elapsed_seconds if elapsed_seconds > 0 else 0.0


def calculate_operation_delta(
    previous: OperationCounters,
    current: OperationCounters,
    elapsed_seconds: float,
) -> DeltaRecord:
    """
    Compute the delta record of a single operation.

    Raw deltas are plain differences and are not clamped, so a counter reset
    shows up as a negative delta.

    Args:
        previous: Counters from the earlier snapshot (or a zero baseline)
        current: Counters from the later snapshot
        elapsed_seconds: Wall-clock seconds between the two snapshots

    Returns:
        DeltaRecord named after ``current``
    """
    delta_ops = current.ops - previous.ops
    delta_sent = current.bytes_sent - previous.bytes_sent
    delta_recv = current.bytes_recv - previous.bytes_recv
    delta_bytes = delta_sent + delta_recv
    delta_rtt = current.rtt - previous.rtt
    delta_exec = current.execute_time - previous.execute_time
    delta_queue = current.queue_time - previous.queue_time

    delta_kb = delta_bytes / BYTES_PER_KB

    return DeltaRecord(
        operation=current.name,
        delta_ops=delta_ops,
        delta_bytes_sent=delta_sent,
        delta_bytes_recv=delta_recv,
        delta_bytes=delta_bytes,
        delta_rtt=delta_rtt,
        delta_exec=delta_exec,
        delta_queue=delta_queue,
        delta_errors=current.errors - previous.errors,
        delta_timeouts=current.timeouts - previous.timeouts,
        ops_per_sec=_per_sec(delta_ops, elapsed_seconds),
        avg_rtt=_per_op(delta_rtt, delta_ops),
        avg_exec=_per_op(delta_exec, delta_ops),
        avg_queue=_per_op(delta_queue, delta_ops),
        kb_per_op=_per_op(delta_kb, delta_ops),
        kb_per_sec=_per_sec(delta_kb, elapsed_seconds),
    )


def calculate_delta_stats(
    previous: MountSnapshot,
    current: MountSnapshot,
    elapsed_seconds: float,
) -> List[DeltaRecord]:
    """
    Compute per-operation statistics between two snapshots of one mount.

    Operations missing from ``previous`` are compared against an all-zero
    baseline. Operations without activity (``delta_ops <= 0``) are dropped.

    Args:
        previous: Earlier snapshot
        current: Later snapshot of the same mount
        elapsed_seconds: Wall-clock seconds between the two snapshots

    Returns:
        Delta records sorted by operation name
    """
    records = []
    for name, current_op in current.operations.items():
        previous_op = previous.operations.get(name) or OperationCounters.zero(name)
        record = calculate_operation_delta(previous_op, current_op, elapsed_seconds)
        if record.delta_ops > 0:
            records.append(record)

    records.sort(key=lambda r: r.operation)
    return records


def calculate_cumulative_stats(mount: MountSnapshot) -> List[DeltaRecord]:
    """
    Statistics accumulated since the mount was created.

    This is the delta against an empty snapshot with the mount age as the
    elapsed time, as printed by the first nfsiostat-style report.
    """
    return calculate_delta_stats(mount.empty_baseline(), mount, float(mount.age))


def calculate_event_deltas(
    previous: MountSnapshot,
    current: MountSnapshot,
) -> Optional[EventCounters]:
    """
    Per-counter difference of the events blocks of two snapshots.

    Returns:
        EventCounters holding deltas, or None if either snapshot has no events block
    """
    if previous.events is None or current.events is None:
        return None

    values: Dict[str, int] = {
        f.name: getattr(current.events, f.name) - getattr(previous.events, f.name)
        for f in fields(EventCounters)
    }
    return EventCounters(**values)


def filter_operations(records: Iterable[DeltaRecord], allowed: Set[str]) -> List[DeltaRecord]:
    """
    Keep only records whose operation is in ``allowed``.

    An empty ``allowed`` set means no filtering. Matching is exact and
    case-sensitive; order is preserved.
    """
    if not allowed:
        return list(records)
    return [r for r in records if r.operation in allowed]


def parse_operations_filter(text: Optional[str]) -> Set[str]:
    """
    Parse a comma-separated list of operation names.

    Names are trimmed and empty entries dropped, so ``"READ, WRITE,"``
    gives ``{"READ", "WRITE"}``. ``None`` or a blank string gives an empty set.
    """
    if not text:
        return set()
    return {name.strip() for name in text.split(",") if name.strip()}
