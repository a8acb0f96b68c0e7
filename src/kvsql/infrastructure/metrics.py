"""Prometheus metrics for the query engine."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all kvsql metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Statement metrics
        self.statements_total = Counter(
            "kvsql_statements_total",
            "Total number of statements processed",
            ["command", "status"],  # status: success, error
            registry=self._registry,
        )

        self.statement_latency_seconds = Histogram(
            "kvsql_statement_latency_seconds",
            "Statement latency in seconds",
            ["command"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self._registry,
        )

        self.rows_affected_total = Counter(
            "kvsql_rows_affected_total",
            "Total rows inserted, updated or deleted",
            ["command"],
            registry=self._registry,
        )

        # Session metrics
        self.database_switches_total = Counter(
            "kvsql_database_switches_total",
            "Total number of database open/switch operations",
            registry=self._registry,
        )

        self.info = Info(
            "kvsql",
            "kvsql build information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from kvsql import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
