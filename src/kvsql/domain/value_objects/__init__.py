"""Value objects for the kvsql domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - RowId: Type-safe row identifier
        - CellKey: (row_id, column) pair and its stored key encoding
        - COLUMN_KEY_PREFIX, COLUMN_ORDER_KEY: Reserved schema keys

    Filters:
        - Predicate: A single column = literal test
        - FilterExpression: Conjunction of predicates
"""

from kvsql.domain.value_objects.filter_expression import (
    MATCH_ALL,
    FilterExpression,
    Predicate,
)
from kvsql.domain.value_objects.identifiers import (
    COLUMN_KEY_PREFIX,
    COLUMN_ORDER_KEY,
    META_KEY_PREFIX,
    CellKey,
    RowId,
    column_key,
    is_schema_key,
)

__all__ = [
    # Identifiers
    "RowId",
    "CellKey",
    "COLUMN_KEY_PREFIX",
    "COLUMN_ORDER_KEY",
    "META_KEY_PREFIX",
    "column_key",
    "is_schema_key",
    # Filters
    "Predicate",
    "FilterExpression",
    "MATCH_ALL",
]
