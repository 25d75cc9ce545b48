"""
Poll loop of the NFS monitor.
"""

from .monitor import NfsMonitor

__all__ = ["NfsMonitor"]
