"""Typed commands produced by the statement parser.

Each statement kind has its own dataclass; the executor dispatches on the
concrete type. ``Command.kind`` gives the tag used for logging and metrics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from kvsql.domain.entities.column import ColumnDefinition
from kvsql.domain.value_objects import MATCH_ALL, FilterExpression


class CommandKind(Enum):
    """Kinds of statements."""

    CREATE_DATABASE = "create_database"
    USE_DATABASE = "use_database"
    CREATE_TABLE = "create_table"
    INSERT = "insert"
    SELECT = "select"
    UPDATE = "update"
    DELETE = "delete"
    DROP_TABLE = "drop_table"


@dataclass(frozen=True)
class Command(ABC):
    """Base class for parsed commands."""

    @property
    @abstractmethod
    def kind(self) -> CommandKind:
        pass

    @property
    def requires_database(self) -> bool:
        """Whether the command needs an active database."""
        return True


@dataclass(frozen=True)
class CreateDatabase(Command):
    """Create (or open) a database and make it active."""

    name: str

    @property
    def kind(self) -> CommandKind:
        return CommandKind.CREATE_DATABASE

    @property
    def requires_database(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"CreateDatabase({self.name})"


@dataclass(frozen=True)
class UseDatabase(Command):
    """Open a database and make it active."""

    name: str

    @property
    def kind(self) -> CommandKind:
        return CommandKind.USE_DATABASE

    @property
    def requires_database(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"UseDatabase({self.name})"


@dataclass(frozen=True)
class CreateTable(Command):
    """Create a table namespace and declare its columns."""

    table: str
    columns: tuple[ColumnDefinition, ...]

    @property
    def kind(self) -> CommandKind:
        return CommandKind.CREATE_TABLE

    def __str__(self) -> str:
        cols = ", ".join(str(c) for c in self.columns)
        return f"CreateTable({self.table}, [{cols}])"


@dataclass(frozen=True)
class Insert(Command):
    """Insert one row. ``columns`` and ``values`` have equal length."""

    table: str
    columns: tuple[str, ...]
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.values):
            raise ValueError(
                f"{len(self.columns)} columns but {len(self.values)} values"
            )

    @property
    def kind(self) -> CommandKind:
        return CommandKind.INSERT

    def cells(self) -> list[tuple[str, str]]:
        """(column, value) pairs of the row."""
        return list(zip(self.columns, self.values))

    def __str__(self) -> str:
        return f"Insert({self.table}, cols={list(self.columns)})"


@dataclass(frozen=True)
class Select(Command):
    """Select rows. An empty ``columns`` tuple means all declared columns."""

    table: str
    columns: tuple[str, ...] = ()
    filter: FilterExpression = field(default=MATCH_ALL)

    @property
    def kind(self) -> CommandKind:
        return CommandKind.SELECT

    @property
    def selects_all(self) -> bool:
        return not self.columns

    def __str__(self) -> str:
        cols = ", ".join(self.columns) or "*"
        where = f" WHERE {self.filter}" if self.filter else ""
        return f"Select({cols} FROM {self.table}{where})"


@dataclass(frozen=True)
class Update(Command):
    """Set one column on every row matching the filter."""

    table: str
    column: str
    value: str
    filter: FilterExpression = field(default=MATCH_ALL)

    @property
    def kind(self) -> CommandKind:
        return CommandKind.UPDATE

    def __str__(self) -> str:
        return f"Update({self.table}, SET {self.column}={self.value} WHERE {self.filter})"


@dataclass(frozen=True)
class Delete(Command):
    """Delete every row matching the filter."""

    table: str
    filter: FilterExpression = field(default=MATCH_ALL)

    @property
    def kind(self) -> CommandKind:
        return CommandKind.DELETE

    def __str__(self) -> str:
        return f"Delete({self.table} WHERE {self.filter})"


@dataclass(frozen=True)
class DropTable(Command):
    """Drop a table with all its schema and rows."""

    table: str

    @property
    def kind(self) -> CommandKind:
        return CommandKind.DROP_TABLE

    def __str__(self) -> str:
        return f"DropTable({self.table})"
