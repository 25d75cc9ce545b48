"""
Configuration data models.

This module contains the configuration structures for collection, display,
metrics export and recording, plus the root AppConfig that aggregates them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config.storage_config import StorageConfig


@dataclass
class CollectionConfig:
    """
    Settings for reading the mountstats report, loaded from `[monitor.collection]`.
    """

    # Path of the kernel report; overridable for testing or offline replays.
    mountstats_path: Path = Path("/proc/self/mountstats")
    # Seconds between two polls.
    interval_seconds: float = 1.0
    # Number of reports to print; 0 means run until interrupted.
    count: int = 0


@dataclass
class DisplayConfig:
    """
    Settings for the text renderer, loaded from `[monitor.display]`.
    """

    # Add MB/s and KB/op columns to the simple table.
    show_bandwidth: bool = False
    # Print attribute cache statistics (nfsiostat layout only).
    show_attr: bool = False
    # Clear the terminal before each report.
    clear_screen: bool = False
    # Use the nfsiostat-compatible layout instead of the simple table.
    nfsiostat_format: bool = False


@dataclass
class MetricsConfig:
    """
    Settings for metrics export, loaded from `[monitor.metrics]`.
    """

    enable_prometheus: bool = False
    prometheus_port: int = 9090
    prometheus_addr: str = "0.0.0.0"


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor's global behavior, loaded from `config.toml`.
    """

    # [monitor.general]
    log_level: str = "INFO"

    collection: CollectionConfig = field(default_factory=CollectionConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
    # Where the configuration was loaded from; None when built-in defaults are used.
    source_path: Optional[Path] = None
