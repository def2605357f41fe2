"""Metrics sinks injected into the sync controller."""

from __future__ import annotations

import logging
from typing import Protocol

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from .models import CommitResult

LOG = logging.getLogger("clouddns_sync.metrics")


class MetricsSink(Protocol):
    """Receives counts after successful reconciliation steps."""

    def record_commit(self, result: CommitResult) -> None:
        """Called once per successful commit."""

    def record_desired(self, count: int) -> None:
        """Called with the record-set count of a successful pass."""


class NullMetrics:
    """Sink that discards everything."""

    def record_commit(self, result: CommitResult) -> None:
        """Ignore a commit."""

    def record_desired(self, count: int) -> None:
        """Ignore the desired count."""


class PrometheusMetrics:
    """Prometheus-backed sink on its own registry."""

    def __init__(self, registry: CollectorRegistry | None = None):
        """Create the metrics on ``registry`` or a fresh one."""
        self.registry = registry or CollectorRegistry()
        self.desired_records = Gauge(
            "clouddns_sync_desired_records",
            "Record-sets derived from the desired state in the last pass.",
            registry=self.registry,
        )
        self.records_added = Counter(
            "clouddns_sync_records_added",
            "Record-sets added by committed changes.",
            registry=self.registry,
        )
        self.records_deleted = Counter(
            "clouddns_sync_records_deleted",
            "Record-sets deleted by committed changes.",
            registry=self.registry,
        )
        self.commits = Counter(
            "clouddns_sync_commits",
            "Changes committed to Cloud DNS.",
            registry=self.registry,
        )

    def serve(self, port: int) -> None:
        """Expose the registry over HTTP."""
        start_http_server(port, registry=self.registry)
        LOG.info("Serving metrics on port %d", port)

    def record_commit(self, result: CommitResult) -> None:
        """Count one commit and the record-sets it touched."""
        self.commits.inc()
        self.records_added.inc(result.added)
        self.records_deleted.inc(result.deleted)

    def record_desired(self, count: int) -> None:
        """Publish the size of the desired state."""
        self.desired_records.set(count)
