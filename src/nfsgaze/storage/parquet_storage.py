"""
Parquet storage backend built on Polars.

Delta records go to compressed Parquet; session metadata is small and meant
to be read by people, so it is written as indented JSON next to it.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import polars as pl

from .base import DataStorage

logger = logging.getLogger(__name__)


class ParquetStorage(DataStorage):
    """
    Parquet/JSON storage backend.

    Args:
        compression: Parquet compression algorithm
    """

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression
        logger.debug(f"ParquetStorage using {compression} compression")

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(path, compression=self.compression)
            logger.debug(f"Wrote {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Could not write {len(df)} rows to {path}: {e}")
            raise

    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        try:
            df = pl.read_parquet(path, columns=columns) if columns else pl.read_parquet(path)
            logger.debug(f"Read {len(df)} rows from {path}")
            return df
        except Exception as e:
            logger.error(f"Could not read Parquet file {path}: {e}")
            raise

    def append_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Append rows to a Parquet file.

        Parquet files cannot be extended in place, so the existing table is
        read, concatenated with ``df`` and written back.
        """
        if self.file_exists(path):
            combined = pl.concat([self.load_dataframe(path), df], how="vertical_relaxed")
            self.save_dataframe(combined, path)
        else:
            self.save_dataframe(df, path)

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            logger.debug(f"Saved metadata to {path}")
        except Exception as e:
            logger.error(f"Could not write metadata to {path}: {e}")
            raise

    def load_dict(self, path: str) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
