"""Domain error hierarchy.

Every per-statement failure is a ``KvSqlError``. The engine turns these
into reported results so the shell always returns to the prompt; only
``DatabaseOpenError`` is allowed to terminate the process.
"""

from __future__ import annotations


class KvSqlError(Exception):
    """Base class for all kvsql errors."""

    pass


class QuerySyntaxError(KvSqlError):
    """Malformed statement."""

    pass


class UnknownCommandError(QuerySyntaxError):
    """The statement's leading keyword is not a known command."""

    def __init__(self, keyword: str) -> None:
        super().__init__(f"Unknown command: {keyword}")
        self.keyword = keyword


class SchemaError(KvSqlError):
    """A referenced table or database is absent or invalid."""

    pass


class TableNotFoundError(SchemaError):
    """The table does not exist in the active database."""

    def __init__(self, table: str) -> None:
        super().__init__(f"table '{table}' does not exist")
        self.table = table


class NoActiveDatabaseError(KvSqlError):
    """A statement needs a database but none is selected."""

    def __init__(self) -> None:
        super().__init__("No database selected")


class StorageError(KvSqlError):
    """The underlying key-value store failed."""

    pass


class DatabaseOpenError(StorageError):
    """A database file could not be opened. Fatal for the process."""

    pass
