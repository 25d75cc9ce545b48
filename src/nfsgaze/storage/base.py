"""
Storage backend interface.

Recorded sessions consist of one tabular data file (delta records) and one
small dictionary sidecar (session metadata). A backend implements both
halves; the recorder and the plotter only talk to this interface.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl


class DataStorage(ABC):
    """Abstract base class for session storage backends."""

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """Write ``df`` to ``path``, replacing any existing file."""

    @abstractmethod
    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """
        Read a table written by ``save_dataframe``.

        Args:
            path: File path to load from
            columns: Columns to read; all columns when None

        Returns:
            Loaded Polars DataFrame
        """

    @abstractmethod
    def append_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """Add the rows of ``df`` to the table at ``path``, creating it if needed."""

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        """Write a metadata dictionary to ``path``."""

    @abstractmethod
    def load_dict(self, path: str) -> Dict[str, Any]:
        """Read a metadata dictionary written by ``save_dict``."""

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()
