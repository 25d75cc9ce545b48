"""
Configuration validation utilities.

This module turns the raw ``[monitor]`` table of config.toml into a validated
MonitorConfig, one section at a time.
"""

from pathlib import Path
from typing import Any, Dict

from ..models.config import (
    CollectionConfig,
    DisplayConfig,
    MetricsConfig,
    MonitorConfig,
)
from .storage_config import SUPPORTED_COMPRESSIONS, StorageConfig
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Missing sections and keys fall back to the dataclass defaults.

    Args:
        monitor_data: Raw ``[monitor]`` table from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    general_settings = monitor_data.get("general", {})

    log_level = validate_enum_choice(
        general_settings.get("log_level", "INFO"),
        valid_choices=LOG_LEVELS,
        field_name="monitor.general.log_level",
        case_sensitive=False,
    )

    return MonitorConfig(
        log_level=log_level,
        collection=validate_collection_config(monitor_data.get("collection", {})),
        display=validate_display_config(monitor_data.get("display", {})),
        metrics=validate_metrics_config(monitor_data.get("metrics", {})),
        storage=validate_storage_config(monitor_data.get("storage", {})),
    )


def validate_collection_config(settings: Dict[str, Any]) -> CollectionConfig:
    """Validate the `[monitor.collection]` section."""
    defaults = CollectionConfig()

    mountstats_path = settings.get("mountstats_path", str(defaults.mountstats_path))
    if not isinstance(mountstats_path, str) or not mountstats_path.strip():
        raise ValidationError(
            "monitor.collection.mountstats_path must be a non-empty string",
            field_name="monitor.collection.mountstats_path",
            value=mountstats_path,
        )

    interval_seconds = validate_positive_float(
        settings.get("interval_seconds", defaults.interval_seconds),
        min_value=0.01,  # 10ms minimum
        max_value=86400.0,  # one day maximum
        field_name="monitor.collection.interval_seconds",
    )

    count = validate_positive_integer(
        settings.get("count", defaults.count),
        min_value=0,  # 0 means run forever
        field_name="monitor.collection.count",
    )

    return CollectionConfig(
        mountstats_path=Path(mountstats_path),
        interval_seconds=interval_seconds,
        count=count,
    )


def validate_display_config(settings: Dict[str, Any]) -> DisplayConfig:
    """Validate the `[monitor.display]` section."""
    values = {}
    for name in ("show_bandwidth", "show_attr", "clear_screen", "nfsiostat_format"):
        values[name] = validate_boolean(
            settings.get(name, False),
            field_name=f"monitor.display.{name}",
        )
    return DisplayConfig(**values)


def validate_metrics_config(settings: Dict[str, Any]) -> MetricsConfig:
    """Validate the `[monitor.metrics]` section."""
    defaults = MetricsConfig()

    enable_prometheus = validate_boolean(
        settings.get("enable_prometheus", defaults.enable_prometheus),
        field_name="monitor.metrics.enable_prometheus",
    )

    prometheus_port = validate_positive_integer(
        settings.get("prometheus_port", defaults.prometheus_port),
        min_value=1,
        max_value=65535,
        field_name="monitor.metrics.prometheus_port",
    )

    prometheus_addr = settings.get("prometheus_addr", defaults.prometheus_addr)
    if not isinstance(prometheus_addr, str) or not prometheus_addr.strip():
        raise ValidationError(
            "monitor.metrics.prometheus_addr must be a non-empty string",
            field_name="monitor.metrics.prometheus_addr",
            value=prometheus_addr,
        )

    return MetricsConfig(
        enable_prometheus=enable_prometheus,
        prometheus_port=prometheus_port,
        prometheus_addr=prometheus_addr,
    )


def validate_storage_config(settings: Dict[str, Any]) -> StorageConfig:
    """Validate the `[monitor.storage]` section."""
    validate_boolean(settings.get("enabled", False), field_name="monitor.storage.enabled")
    validate_enum_choice(
        settings.get("compression", "snappy"),
        valid_choices=list(SUPPORTED_COMPRESSIONS),
        field_name="monitor.storage.compression",
    )
    validate_positive_integer(
        settings.get("flush_every", 10),
        min_value=1,
        max_value=100000,
        field_name="monitor.storage.flush_every",
    )

    try:
        return StorageConfig.from_dict(settings)
    except ValueError as e:
        raise ValidationError(f"Invalid storage configuration: {e}", field_name="monitor.storage") from e
