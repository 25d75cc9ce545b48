"""
Metrics export of NFS statistics.

Exporters receive each poll's delta records plus the current snapshot of the
mount. The Prometheus exporter keeps its metrics in a private registry, so
several exporters (e.g. in tests) never collide, and exposes them through the
prometheus_client HTTP server.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

from ..models.config import MetricsConfig
from ..models.mountstats import EVENT_FIELDS, DeltaRecord, EventCounters, MountSnapshot

logger = logging.getLogger(__name__)

# Seconds; RTT averages arrive in milliseconds and are converted.
RTT_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

MOUNT_LABELS = ["mount", "server", "export"]
OPERATION_LABELS = MOUNT_LABELS + ["operation"]


class MetricsExporter(ABC):
    """Interface of a metrics backend fed once per poll."""

    @abstractmethod
    def export_operation_metrics(self, mount: MountSnapshot, records: List[DeltaRecord]) -> None:
        """Export one poll's per-operation delta records of a mount."""

    @abstractmethod
    def export_event_metrics(self, mount: MountSnapshot, events: EventCounters) -> None:
        """Export the cumulative VFS event counters of a mount."""

    @abstractmethod
    def export_mount_metrics(self, mount: MountSnapshot) -> None:
        """Export mount-level values (age, cumulative bytes)."""

    @abstractmethod
    def get_metrics_output(self) -> Optional[str]:
        """Return the current metrics in the backend's text format, if it has one."""


class PrometheusExporter(MetricsExporter):
    """
    Prometheus exporter backed by prometheus_client.

    Counters only ever move forward: a negative delta (remounted share) is
    skipped instead of being subtracted.

    Args:
        registry: Registry to register metrics in; a fresh private one when None
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self.operations_total = Counter(
            "nfs_operations_total",
            "Total number of NFS operations performed",
            OPERATION_LABELS,
            registry=self.registry,
        )
        self.operation_bytes_total = Counter(
            "nfs_operation_bytes_total",
            "Total bytes transferred in NFS operations",
            OPERATION_LABELS,
            registry=self.registry,
        )
        self.operation_errors_total = Counter(
            "nfs_operation_errors_total",
            "Total number of NFS operation errors",
            OPERATION_LABELS,
            registry=self.registry,
        )
        self.operation_timeouts_total = Counter(
            "nfs_operation_timeouts_total",
            "Total number of NFS operation timeouts",
            OPERATION_LABELS,
            registry=self.registry,
        )
        self.operation_rtt_seconds = Histogram(
            "nfs_operation_rtt_seconds",
            "Average round trip time of NFS operations per poll, in seconds",
            OPERATION_LABELS,
            buckets=RTT_BUCKETS,
            registry=self.registry,
        )
        self.operations_per_second = Gauge(
            "nfs_operations_per_second",
            "NFS operations per second over the last poll interval",
            OPERATION_LABELS,
            registry=self.registry,
        )
        self.vfs_events = Gauge(
            "nfs_vfs_events",
            "Cumulative NFS VFS and cache events since mount",
            MOUNT_LABELS + ["event"],
            registry=self.registry,
        )
        self.mount_age_seconds = Gauge(
            "nfs_mount_age_seconds",
            "Age of NFS mount in seconds",
            MOUNT_LABELS,
            registry=self.registry,
        )
        self.mount_bytes_read = Gauge(
            "nfs_mount_bytes_read",
            "Cumulative bytes read from NFS mount",
            MOUNT_LABELS,
            registry=self.registry,
        )
        self.mount_bytes_written = Gauge(
            "nfs_mount_bytes_written",
            "Cumulative bytes written to NFS mount",
            MOUNT_LABELS,
            registry=self.registry,
        )

    @staticmethod
    def _mount_labels(mount: MountSnapshot) -> dict:
        return {"mount": mount.mount_path, "server": mount.server, "export": mount.export}

    def start_server(self, port: int, addr: str = "0.0.0.0") -> None:
        """Serve ``/metrics`` from a daemon thread."""
        start_http_server(port, addr=addr, registry=self.registry)
        logger.info(f"Prometheus metrics available at http://{addr}:{port}/metrics")

    def export_operation_metrics(self, mount: MountSnapshot, records: List[DeltaRecord]) -> None:
        for record in records:
            labels = dict(self._mount_labels(mount), operation=record.operation)

            if record.delta_ops > 0:
                self.operations_total.labels(**labels).inc(record.delta_ops)
            if record.delta_bytes > 0:
                self.operation_bytes_total.labels(**labels).inc(record.delta_bytes)
            if record.delta_errors > 0:
                self.operation_errors_total.labels(**labels).inc(record.delta_errors)
            if record.delta_timeouts > 0:
                self.operation_timeouts_total.labels(**labels).inc(record.delta_timeouts)
            if record.avg_rtt > 0:
                self.operation_rtt_seconds.labels(**labels).observe(record.avg_rtt / 1000.0)

            self.operations_per_second.labels(**labels).set(record.ops_per_sec)

    def export_event_metrics(self, mount: MountSnapshot, events: EventCounters) -> None:
        labels = self._mount_labels(mount)
        for name in EVENT_FIELDS:
            self.vfs_events.labels(event=name, **labels).set(getattr(events, name))

    def export_mount_metrics(self, mount: MountSnapshot) -> None:
        labels = self._mount_labels(mount)
        self.mount_age_seconds.labels(**labels).set(mount.age)
        self.mount_bytes_read.labels(**labels).set(mount.bytes_read)
        self.mount_bytes_written.labels(**labels).set(mount.bytes_write)

    def get_metrics_output(self) -> Optional[str]:
        return generate_latest(self.registry).decode("utf-8")


class MetricsManager:
    """
    Fans one poll's results out to every enabled exporter.

    Args:
        config: Metrics settings; decides which exporters are created
        exporters: Explicit exporter list, overriding ``config``
    """

    def __init__(self, config: Optional[MetricsConfig] = None, exporters: Optional[List[MetricsExporter]] = None):
        self.config = config or MetricsConfig()
        if exporters is not None:
            self.exporters = list(exporters)
        else:
            self.exporters = []
            if self.config.enable_prometheus:
                self.exporters.append(PrometheusExporter())

    @property
    def enabled(self) -> bool:
        return bool(self.exporters)

    def start(self) -> None:
        """Start the HTTP endpoints of exporters that serve one."""
        for exporter in self.exporters:
            if isinstance(exporter, PrometheusExporter):
                exporter.start_server(self.config.prometheus_port, self.config.prometheus_addr)

    def publish(self, mount: MountSnapshot, records: List[DeltaRecord]) -> None:
        """Export one mount's poll results to all exporters."""
        for exporter in self.exporters:
            exporter.export_operation_metrics(mount, records)
            if mount.events is not None:
                exporter.export_event_metrics(mount, mount.events)
            exporter.export_mount_metrics(mount)
