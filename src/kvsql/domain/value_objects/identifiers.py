"""Row identifiers and the cell key encoding.

A table namespace holds three kinds of keys:

    col:<column>        column definition (schema)
    meta:columns        declaration order of the columns (schema)
    <row_id>:<column>   one cell of one row (data)

Row ids are written in canonical decimal form so that a key decoded by
``CellKey.from_bytes`` always re-encodes to the same bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType


RowId = NewType("RowId", int)
"""Identifier of a row within its table. Drawn from the table's sequence counter."""

KEY_SEPARATOR = ":"

COLUMN_KEY_PREFIX = b"col:"
"""Prefix of the per-column schema keys."""

META_KEY_PREFIX = b"meta:"
"""Prefix of schema bookkeeping keys."""

COLUMN_ORDER_KEY = META_KEY_PREFIX + b"columns"
"""Key holding the JSON list of column names in declaration order."""

SCHEMA_KEY_PREFIXES = (COLUMN_KEY_PREFIX, META_KEY_PREFIX)


def is_schema_key(key: bytes) -> bool:
    """Return True if ``key`` belongs to the schema rather than to row data."""
    return key.startswith(SCHEMA_KEY_PREFIXES)


def column_key(name: str) -> bytes:
    """Encode the schema key of column ``name``."""
    return COLUMN_KEY_PREFIX + name.encode("utf-8")


@dataclass(frozen=True, slots=True)
class CellKey:
    """Key of a single cell: the (row id, column) pair.

    Attributes:
        row_id: The row this cell belongs to
        column: The column name

    Example:
        >>> CellKey(RowId(7), "name").to_bytes()
        b'7:name'
        >>> CellKey.from_bytes(b"7:name")
        CellKey(7:name)
    """

    row_id: RowId
    column: str

    def __post_init__(self) -> None:
        """Validate the cell key."""
        if self.row_id < 1:
            raise ValueError(f"row_id must be positive, got {self.row_id}")
        if not self.column or KEY_SEPARATOR in self.column:
            raise ValueError(f"invalid column name {self.column!r}")

    def __repr__(self) -> str:
        return f"CellKey({self.row_id}:{self.column})"

    def to_bytes(self) -> bytes:
        """Serialize to the stored key form ``<row_id>:<column>``."""
        return f"{self.row_id}{KEY_SEPARATOR}{self.column}".encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> CellKey:
        """Deserialize a stored key.

        Args:
            data: Raw key bytes

        Returns:
            CellKey instance

        Raises:
            ValueError: If the key is not exactly ``<decimal id>:<column>``
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"cell key is not valid UTF-8: {data!r}") from e

        parts = text.split(KEY_SEPARATOR)
        if len(parts) != 2:
            raise ValueError(f"cell key must have two parts: {text!r}")

        raw_id, column = parts
        if not raw_id.isascii() or not raw_id.isdigit() or str(int(raw_id)) != raw_id:
            raise ValueError(f"cell key has a non-canonical row id: {text!r}")

        return cls(row_id=RowId(int(raw_id)), column=column)
