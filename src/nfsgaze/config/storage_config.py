"""
Recording configuration model.

This module defines the StorageConfig dataclass, which controls whether delta
records are written to disk, where they go, and how the Parquet output is
compressed.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal

SUPPORTED_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class StorageConfig:
    """
    Recording settings from `[monitor.storage]` or `--record`.

    Attributes:
        enabled: Write every poll's delta records to a Parquet session file
        output_dir: Directory receiving the session files
        compression: Parquet codec, one of SUPPORTED_COMPRESSIONS; snappy is
            the fastest, zstd and brotli give the smallest files
        flush_every: Number of polls buffered before the session file is rewritten
    """

    enabled: bool = False
    output_dir: Path = Path("nfsgaze_records")
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"
    flush_every: int = 10

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Build a StorageConfig from the raw `[monitor.storage]` table.

        Missing keys take the defaults.

        Raises:
            ValueError: If a value has the wrong type or an unknown codec
        """
        enabled = config_dict.get("enabled", False)
        output_dir = config_dict.get("output_dir", "nfsgaze_records")
        compression = config_dict.get("compression", "snappy")
        flush_every = config_dict.get("flush_every", 10)

        if not isinstance(enabled, bool):
            raise ValueError(f"storage.enabled must be a boolean, got {enabled!r}")

        if compression not in SUPPORTED_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        if isinstance(flush_every, bool) or not isinstance(flush_every, int) or flush_every < 1:
            raise ValueError(f"storage.flush_every must be a positive integer, got {flush_every!r}")

        return cls(
            enabled=enabled,
            output_dir=Path(output_dir),
            compression=compression,
            flush_every=flush_every,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of from_dict; stored in the session metadata."""
        return {
            "enabled": self.enabled,
            "output_dir": str(self.output_dir),
            "compression": self.compression,
            "flush_every": self.flush_every,
        }
