"""
Metrics exporters for NFS statistics.
"""

from .prometheus import MetricsExporter, MetricsManager, PrometheusExporter

__all__ = [
    "MetricsExporter",
    "MetricsManager",
    "PrometheusExporter",
]
