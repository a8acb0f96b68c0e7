"""Query service port.

This inbound port is what the shell (and any other front end) talks to:
one raw statement in, one ``ExecutionResult`` out. Per-statement failures
are reported inside the result rather than raised.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol

from kvsql.domain.errors import KvSqlError


@dataclass
class Row:
    """A row of data returned by a query.

    Values can be accessed by column name or index.
    """

    columns: list[str]
    values: list[str]

    def __getitem__(self, key: str | int) -> str:
        if isinstance(key, int):
            return self.values[key]
        try:
            idx = self.columns.index(key)
            return self.values[idx]
        except ValueError as e:
            raise KeyError(f"Column '{key}' not found") from e

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def as_dict(self) -> dict[str, str]:
        return dict(zip(self.columns, self.values))

    def __repr__(self) -> str:
        pairs = ", ".join(f"{c}={v!r}" for c, v in zip(self.columns, self.values))
        return f"Row({pairs})"


@dataclass
class ExecutionResult:
    """Result of executing one statement.

    Queries carry ``columns`` and ``rows``; other statements carry a status
    ``message``. A failed statement has ``error`` set and its message is
    the error text.
    """

    rows: list[Row] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    affected_rows: int = 0
    message: str = ""
    is_query: bool = False
    error: KvSqlError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: KvSqlError) -> ExecutionResult:
        return cls(message=str(error), error=error)


class QueryService(Protocol):
    """Protocol for executing textual statements."""

    @abstractmethod
    def execute(self, statement: str) -> ExecutionResult:
        """Parse and execute one statement.

        Args:
            statement: Raw statement text (one line).

        Returns:
            The result, with ``error`` set for per-statement failures.

        Raises:
            DatabaseOpenError: If a database file cannot be opened.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the active database, if any."""
        ...
