"""
Data models and structures for nfsgaze.

Mountstats Models:
- Cumulative per-operation and event counters of a mount
- Mount snapshots produced by the parser
- Delta records produced by the delta engine

Configuration Models:
- Collection, display, metrics and storage settings
- The root application configuration
"""

# Mountstats models
from .mountstats import (
    EVENT_FIELDS,
    REQUIRED_EVENT_FIELDS,
    DeltaRecord,
    EventCounters,
    MountSnapshot,
    OperationCounters,
)

# Configuration models
from .config import (
    AppConfig,
    CollectionConfig,
    DisplayConfig,
    MetricsConfig,
    MonitorConfig,
)

__all__ = [
    # Mountstats
    "EVENT_FIELDS",
    "REQUIRED_EVENT_FIELDS",
    "DeltaRecord",
    "EventCounters",
    "MountSnapshot",
    "OperationCounters",
    # Configuration
    "AppConfig",
    "CollectionConfig",
    "DisplayConfig",
    "MetricsConfig",
    "MonitorConfig",
]
