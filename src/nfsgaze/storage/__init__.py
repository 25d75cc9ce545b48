"""
Storage of recorded monitoring sessions.
"""

from .base import DataStorage
from .factory import create_storage, create_storage_from_config
from .parquet_storage import ParquetStorage
from .recorder import ROW_SCHEMA, DeltaRecorder, default_session_name

__all__ = [
    "DataStorage",
    "ParquetStorage",
    "create_storage",
    "create_storage_from_config",
    "DeltaRecorder",
    "ROW_SCHEMA",
    "default_session_name",
]
