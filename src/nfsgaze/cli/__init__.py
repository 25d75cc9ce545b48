"""
Command-line interface for nfsgaze.
"""

from .main import main_cli

__all__ = ["main_cli"]
