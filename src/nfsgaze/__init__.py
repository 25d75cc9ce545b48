"""
nfsgaze: NFS I/O statistics monitor.

This package reads the kernel's NFS mountstats report, turns successive
snapshots of it into per-operation throughput, latency and error statistics,
and presents them as an iostat-like live view.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures for mount snapshots, delta records and settings
- validation: Exceptions, input validation and error handling
- parsing: The mountstats parser
- stats: Delta/rate engine and operation filter
- display: Text rendering
- monitoring: The poll loop
- metrics: Prometheus exporter
- storage: Recording of delta records to Parquet
- cli: Command-line interface

Usage:
    From command line:
        nfsgaze [mount_point] [options]

    Programmatically:
        from nfsgaze import read_mountstats, calculate_delta_stats
        before = read_mountstats()
        ...
        after = read_mountstats()
        records = calculate_delta_stats(before["/mnt/nfs"], after["/mnt/nfs"], 1.0)
"""

# Configuration first: the configuration models import from it.
from .config import get_config, clear_config_cache, set_config_path

# Model classes for external use
from .models import (
    AppConfig,
    DeltaRecord,
    EventCounters,
    MonitorConfig,
    MountSnapshot,
    OperationCounters,
)

# Core operations
from .parsing import parse_mountstats_lines, parse_mountstats_text, read_mountstats
from .stats import (
    calculate_cumulative_stats,
    calculate_delta_stats,
    calculate_event_deltas,
    filter_operations,
    parse_operations_filter,
)
from .monitoring import NfsMonitor
from .cli import main_cli

# Errors
from .validation import (
    FieldParseError,
    InsufficientTokensError,
    MountNotFoundError,
    MountstatsParseError,
    NfsGazeError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "get_config",
    "clear_config_cache",
    "set_config_path",
    # Models
    "AppConfig",
    "DeltaRecord",
    "EventCounters",
    "MonitorConfig",
    "MountSnapshot",
    "OperationCounters",
    # Core operations
    "parse_mountstats_lines",
    "parse_mountstats_text",
    "read_mountstats",
    "calculate_cumulative_stats",
    "calculate_delta_stats",
    "calculate_event_deltas",
    "filter_operations",
    "parse_operations_filter",
    "NfsMonitor",
    "main_cli",
    # Errors
    "FieldParseError",
    "InsufficientTokensError",
    "MountNotFoundError",
    "MountstatsParseError",
    "NfsGazeError",
    "ValidationError",
]
