"""Query Engine - unified entry point for statement execution.

This module provides the QueryEngine class that wires the statement
parser, the session and the executor together behind a single
``execute()`` call.

Usage:
    from kvsql.application import QueryEngine

    with QueryEngine() as engine:
        engine.execute("CREATE DATABASE shop")
        engine.execute("CREATE TABLE users (name text, age text)")
        engine.execute("INSERT INTO users (name, age) VALUES (Alice, 30)")
        result = engine.execute("SELECT * FROM users")
"""

from __future__ import annotations

import time
from types import TracebackType

from opentelemetry import trace

from kvsql.adapters.inbound.statement_parser import StatementParser
from kvsql.adapters.outbound.store_factory import StoreFactory
from kvsql.application.executor import QueryExecutor
from kvsql.application.session import Session
from kvsql.domain.entities import Command
from kvsql.domain.errors import DatabaseOpenError, KvSqlError
from kvsql.infrastructure.config import Config, get_config
from kvsql.infrastructure.logging import get_logger
from kvsql.infrastructure.metrics import MetricsRegistry, get_metrics
from kvsql.infrastructure.tracing import record_failure, statement_span, tag_command
from kvsql.ports.inbound import ExecutionResult

logger = get_logger(__name__)

# Metric label for statements that never parsed
_UNPARSED = "unknown"


class QueryEngine:
    """Parses and executes statements against the active database.

    Per-statement failures come back as results with ``error`` set, so a
    caller can keep going after a bad statement. ``DatabaseOpenError`` is
    the exception: it propagates, and the shell treats it as fatal.
    """

    def __init__(
        self,
        config: Config | None = None,
        store_factory: StoreFactory | None = None,
        metrics: MetricsRegistry | None = None,
        tracer: trace.Tracer | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Configuration. Uses the global configuration if None.
            store_factory: Opener for database files. Derived from the
                storage configuration if None.
            metrics: Metrics registry. Uses the global registry if None.
            tracer: Tracer for statement spans. Uses the global tracer if None.
        """
        self._config = config or get_config()
        self._metrics = metrics or get_metrics()
        self._tracer = tracer
        self._parser = StatementParser()
        self._session = Session(self._config, store_factory, self._metrics)
        self._executor = QueryExecutor(self._session)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def session(self) -> Session:
        return self._session

    @property
    def database_name(self) -> str | None:
        """Name of the active database, or None."""
        return self._session.database_name

    def execute(self, statement: str) -> ExecutionResult:
        """Execute one statement.

        Args:
            statement: Raw statement text.

        Returns:
            ExecutionResult with rows and/or a status message, or with
            ``error`` set if the statement failed.

        Raises:
            DatabaseOpenError: If a database file cannot be opened.
        """
        command_label = _UNPARSED
        started = time.perf_counter()

        with statement_span(statement, self._tracer) as span:
            try:
                command = self._parser.parse(statement)
                command_label = command.kind.value
                tag_command(span, command, self._session.database_name)
                result = self._run(command)
            except DatabaseOpenError:
                self._record(command_label, "error", started)
                raise
            except KvSqlError as e:
                logger.warning(
                    "statement_failed",
                    command=command_label,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                record_failure(span, e)
                self._record(command_label, "error", started)
                return ExecutionResult.failure(e)

        self._record(command_label, "success", started)
        if result.affected_rows:
            self._metrics.rows_affected_total.labels(command=command_label).inc(
                result.affected_rows
            )
        return result

    def use(self, name: str) -> ExecutionResult:
        """Select a database, as ``USE <name>`` would."""
        return self.execute(f"USE {name}")

    def close(self) -> None:
        """Close the active database, if any."""
        self._session.close()

    def _run(self, command: Command) -> ExecutionResult:
        logger.debug("statement_executing", command=str(command))
        return self._executor.execute(command)

    def _record(self, command: str, status: str, started: float) -> None:
        self._metrics.statements_total.labels(command=command, status=status).inc()
        self._metrics.statement_latency_seconds.labels(command=command).observe(
            time.perf_counter() - started
        )

    def __enter__(self) -> QueryEngine:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
