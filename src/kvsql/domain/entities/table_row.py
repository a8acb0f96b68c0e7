"""Rows materialized from a table namespace."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from kvsql.domain.value_objects import CellKey, RowId


@dataclass
class TableRow:
    """A row reassembled from its cells.

    A row has no existence marker of its own: it exists exactly as long as
    at least one of its ``<row_id>:<column>`` cells does.
    """

    row_id: RowId
    cells: dict[str, str] = field(default_factory=dict)

    def project(self, columns: Iterable[str]) -> list[str]:
        """Values for ``columns`` in order, empty string for missing cells."""
        return [self.cells.get(column, "") for column in columns]

    def cell_keys(self) -> list[CellKey]:
        """Keys of every cell held by this row."""
        return [CellKey(self.row_id, column) for column in self.cells]
