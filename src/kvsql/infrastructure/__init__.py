"""Infrastructure layer - cross-cutting concerns."""

from kvsql.infrastructure.config import Config, get_config
from kvsql.infrastructure.logging import setup_logging, get_logger
from kvsql.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from kvsql.infrastructure.tracing import setup_tracing, get_tracer, statement_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "statement_span",
]
