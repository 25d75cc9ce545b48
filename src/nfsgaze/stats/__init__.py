"""
Delta computation and operation filtering.
"""

from .delta import (
    calculate_cumulative_stats,
    calculate_delta_stats,
    calculate_event_deltas,
    calculate_operation_delta,
    filter_operations,
    parse_operations_filter,
)

__all__ = [
    "calculate_cumulative_stats",
    "calculate_delta_stats",
    "calculate_event_deltas",
    "calculate_operation_delta",
    "filter_operations",
    "parse_operations_filter",
]
