"""Column definitions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    """A column name plus its verbatim definition text.

    The definition (``"age text"``, ``"price decimal(10,2) not null"``) is
    stored as written and never interpreted.
    """

    name: str
    definition: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("column name must not be empty")
        if ":" in self.name:
            raise ValueError(f"column name must not contain ':': {self.name!r}")

    def __str__(self) -> str:
        return self.definition
