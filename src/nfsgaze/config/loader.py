"""
Reading of the nfsgaze TOML configuration file.

Only the ``[monitor]`` table is used; other tables are ignored so the file
can be shared with other tools.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

MONITOR_TABLE = "monitor"


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse a TOML file into a dictionary.

    Args:
        file_path: File to read
        description: Name of the file used in log and error messages

    Raises:
        FileNotFoundError: If ``file_path`` does not exist
        tomllib.TOMLDecodeError: If the content is not valid TOML
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"{description} not found: {file_path}")

    logger.debug(f"Reading {description}: {file_path}")
    with open(file_path, "rb") as f:
        return tomllib.load(f)


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """
    Return the ``[monitor]`` table of config.toml.

    A file without that table yields an empty dict, i.e. all defaults.
    """
    data = load_toml_file(config_path, "main configuration file")
    monitor = data.get(MONITOR_TABLE, {})
    if not monitor:
        logger.warning(f"No [{MONITOR_TABLE}] table in {config_path}, using defaults")
    return monitor
