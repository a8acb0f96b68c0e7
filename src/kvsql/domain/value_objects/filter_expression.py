"""Conjunctive equality filters shared by SELECT, UPDATE and DELETE."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Predicate:
    """A single ``column = literal`` test."""

    column: str
    value: str

    def __str__(self) -> str:
        return f"{self.column} = {self.value}"

    def matches(self, cells: Mapping[str, str]) -> bool:
        """A row lacking the cell fails the predicate."""
        return self.column in cells and cells[self.column] == self.value


@dataclass(frozen=True, slots=True)
class FilterExpression:
    """Conjunction of predicates. The empty filter matches every row.

    Example:
        >>> f = FilterExpression((Predicate("name", "Alice"), Predicate("age", "30")))
        >>> f.matches({"name": "Alice", "age": "30"})
        True
        >>> f.matches({"name": "Alice"})
        False
    """

    predicates: tuple[Predicate, ...] = ()

    def __str__(self) -> str:
        return " AND ".join(str(p) for p in self.predicates)

    def __bool__(self) -> bool:
        return bool(self.predicates)

    @property
    def columns(self) -> tuple[str, ...]:
        """Columns referenced by the filter."""
        return tuple(p.column for p in self.predicates)

    def matches(self, cells: Mapping[str, str]) -> bool:
        """Return True if every predicate holds for ``cells``."""
        return all(p.matches(cells) for p in self.predicates)


MATCH_ALL = FilterExpression()
