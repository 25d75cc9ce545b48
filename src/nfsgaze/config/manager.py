"""
Process-wide access to the nfsgaze configuration.

The configuration is read and validated on the first ``get_config()`` call
and cached afterwards. The CLI points the manager at a ``--config`` file
with ``set_config_path()`` before that first call; tests restore the
default with ``reset_config_path()``.
"""

import logging
import tomllib
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig, MonitorConfig
from ..validation import ErrorSeverity, ValidationError, handle_config_error
from .loader import load_main_config
from .validators import validate_monitor_config

logger = logging.getLogger(__name__)

# Cached configuration, None until first loaded.
_CONFIG: Optional[AppConfig] = None

# <repo>/conf/config.toml; absent in an installed package.
_DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
_CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH


def set_config_path(config_path: Path) -> None:
    """
    Use ``config_path`` instead of the default config.toml.

    Drops any cached configuration. The file must exist by the time
    ``get_config()`` runs.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.debug(f"Configuration file: {_CONFIG_FILE_PATH}")


def reset_config_path() -> None:
    """Go back to the default configuration file and drop the cache."""
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH
    _CONFIG = None


def clear_config_cache() -> None:
    """Force the next ``get_config()`` to re-read the current file."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AppConfig:
    """
    Read and validate one configuration file.

    Raises:
        FileNotFoundError: If an explicitly set file is missing
        ValidationError: If a value is invalid
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    if config_path == _DEFAULT_CONFIG_FILE_PATH and not config_path.exists():
        logger.debug(f"{config_path} does not exist, using built-in defaults")
        return AppConfig(monitor=MonitorConfig())

    try:
        monitor_config = validate_monitor_config(load_main_config(config_path))
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValidationError) as e:
        # Logged once here; callers decide whether the error is fatal.
        handle_config_error(
            error=e,
            context=f"loading {config_path}",
            severity=ErrorSeverity.DEBUG,
            reraise=True,
            logger=logger,
        )

    logger.info(f"Loaded configuration from {config_path}")
    return AppConfig(monitor=monitor_config, source_path=config_path)


def get_config() -> AppConfig:
    """
    Return the cached configuration, loading it on first use.

    Raises:
        FileNotFoundError: If an explicitly set file is missing
        ValidationError: If a value is invalid
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> dict:
    """Describe the configuration state, for diagnostics."""
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "using_defaults": _CONFIG is not None and _CONFIG.source_path is None,
    }
