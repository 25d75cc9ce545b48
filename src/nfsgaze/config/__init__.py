"""
Configuration management for the nfsgaze package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file with singleton pattern management.
"""

# Imported first: the configuration models depend on it.
from .storage_config import StorageConfig

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    reset_config_path,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import load_main_config, load_toml_file
from .validators import (
    validate_collection_config,
    validate_display_config,
    validate_metrics_config,
    validate_monitor_config,
    validate_storage_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "reset_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    "StorageConfig",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_monitor_config",
    "validate_collection_config",
    "validate_display_config",
    "validate_metrics_config",
    "validate_storage_config",
]
