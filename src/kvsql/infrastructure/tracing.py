"""OpenTelemetry tracing for statement execution.

Every statement the engine runs is wrapped in one ``kvsql.statement`` span.
Once parsed, the span is tagged with the command kind and the active
database; a statement that fails is marked with an ERROR status and the
error's class name.

Spans go nowhere until ``setup_tracing`` installs a provider with an OTLP
exporter, so the shell pays almost nothing when tracing is disabled.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from kvsql.domain.entities import Command
    from kvsql.infrastructure.config import ObservabilityConfig

STATEMENT_SPAN = "kvsql.statement"
COMMAND_ATTRIBUTE = "kvsql.command"
DATABASE_ATTRIBUTE = "kvsql.database"
ERROR_TYPE_ATTRIBUTE = "kvsql.error_type"

# Long statements are cut so a bulk INSERT cannot bloat the exported span
_MAX_STATEMENT_CHARS = 256

_INSTRUMENTATION_NAME = "kvsql"

_tracer: trace.Tracer | None = None


def setup_tracing(config: ObservabilityConfig) -> trace.Tracer | None:
    """
    Install a tracer provider that exports statement spans over OTLP.

    Args:
        config: Observability settings; ``otel_endpoint`` selects the
            collector and ``otel_service_name`` names the resource.

    Returns:
        The configured tracer, or None when no endpoint is configured.
    """
    global _tracer

    if not config.otel_endpoint:
        return None

    from kvsql import __version__

    resource = Resource.create(
        {
            "service.name": config.otel_service_name,
            "service.version": __version__,
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otel_endpoint, insecure=True))
    )
    trace.set_tracer_provider(provider)

    _tracer = provider.get_tracer(_INSTRUMENTATION_NAME)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(_INSTRUMENTATION_NAME)
    return _tracer


@contextmanager
def statement_span(
    statement: str,
    tracer: trace.Tracer | None = None,
) -> Generator[trace.Span, None, None]:
    """
    Open the span covering one statement.

    Exceptions escaping the block are recorded on the span by OpenTelemetry
    itself; failures the caller turns into results go through
    ``record_failure``.

    Args:
        statement: Raw statement text, attached truncated as ``db.statement``.
        tracer: Tracer to use. Defaults to the global tracer.

    Yields:
        The statement span
    """
    tracer = tracer or get_tracer()
    with tracer.start_as_current_span(STATEMENT_SPAN) as span:
        span.set_attribute("db.system", "kvsql")
        span.set_attribute("db.statement", statement.strip()[:_MAX_STATEMENT_CHARS])
        yield span


def tag_command(span: trace.Span, command: Command, database: str | None) -> None:
    """Attach the parsed command kind and the active database to a span."""
    span.set_attribute(COMMAND_ATTRIBUTE, command.kind.value)
    if database is not None:
        span.set_attribute(DATABASE_ATTRIBUTE, database)


def record_failure(span: trace.Span, error: Exception) -> None:
    """Mark a statement span as failed."""
    span.set_attribute(ERROR_TYPE_ATTRIBUTE, type(error).__name__)
    span.set_status(Status(StatusCode.ERROR, str(error)))
