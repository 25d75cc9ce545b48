"""
Text output of NFS statistics.
"""

from .renderer import (
    CLEAR_SCREEN,
    StatsRenderer,
    format_bandwidth,
    format_duration,
    format_rate,
)

__all__ = [
    "CLEAR_SCREEN",
    "StatsRenderer",
    "format_bandwidth",
    "format_duration",
    "format_rate",
]
