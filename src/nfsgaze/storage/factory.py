"""
Factory for creating storage instances.
"""

import logging

from ..config.storage_config import SUPPORTED_COMPRESSIONS, StorageConfig
from .base import DataStorage
from .parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)


def create_storage(compression: str = "snappy") -> DataStorage:
    """
    Create the storage backend used for recorded sessions.

    Args:
        compression: Parquet compression algorithm

    Returns:
        DataStorage instance

    Raises:
        ValueError: If the compression algorithm is not supported
    """
    if compression not in SUPPORTED_COMPRESSIONS:
        raise ValueError(f"Unsupported compression algorithm: {compression}")
    logger.debug(f"Creating ParquetStorage with compression: {compression}")
    return ParquetStorage(compression=compression)


def create_storage_from_config(storage_config: StorageConfig) -> DataStorage:
    return create_storage(storage_config.compression)
