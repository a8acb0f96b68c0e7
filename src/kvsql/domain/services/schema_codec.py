"""Schema codec: column definitions stored inside a table's namespace.

Layout within the bucket:

    col:<name>      -> definition text, verbatim (e.g. b"age text")
    meta:columns    -> JSON array of column names in declaration order

The order record exists because ``col:`` keys come back in byte order,
which has nothing to do with the order the columns were declared in.
Buckets written without an order record fall back to key order.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from kvsql.domain.entities import ColumnDefinition
from kvsql.domain.value_objects import COLUMN_KEY_PREFIX, COLUMN_ORDER_KEY, column_key
from kvsql.infrastructure.logging import get_logger
from kvsql.ports.outbound import Bucket

logger = get_logger(__name__)


class SchemaCodec:
    """Reads and writes column definitions of a table."""

    def define_column(self, bucket: Bucket, column: ColumnDefinition) -> None:
        """Store one column definition, overwriting any previous one.

        A column seen for the first time is appended to the declared order;
        redefining a column keeps its position.
        """
        self.define_columns(bucket, [column])

    def define_columns(self, bucket: Bucket, columns: Iterable[ColumnDefinition]) -> None:
        """Store several column definitions with a single order-record write."""
        order = self._load_order(bucket)
        if order is None:
            order = self._names_by_key_order(bucket)

        for column in columns:
            bucket.put(column_key(column.name), column.definition.encode("utf-8"))
            if column.name not in order:
                order.append(column.name)

        bucket.put(COLUMN_ORDER_KEY, json.dumps(order).encode("utf-8"))

    def list_columns(self, bucket: Bucket) -> list[ColumnDefinition]:
        """Return the table's columns in declaration order."""
        definitions = {
            key[len(COLUMN_KEY_PREFIX):].decode("utf-8"): value.decode("utf-8")
            for key, value in bucket.items(COLUMN_KEY_PREFIX)
        }

        order = self._load_order(bucket)
        if order is None:
            # Key order; bucket predates the order record
            order = list(definitions)

        return [
            ColumnDefinition(name=name, definition=definitions[name])
            for name in order
            if name in definitions
        ]

    def column_names(self, bucket: Bucket) -> list[str]:
        """Return the table's column names in declaration order."""
        return [column.name for column in self.list_columns(bucket)]

    def _load_order(self, bucket: Bucket) -> list[str] | None:
        raw = bucket.get(COLUMN_ORDER_KEY)
        if raw is None:
            return None
        try:
            order = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("column_order_unreadable", table=bucket.name)
            return None
        if not isinstance(order, list) or not all(isinstance(n, str) for n in order):
            logger.warning("column_order_unreadable", table=bucket.name)
            return None
        return order

    def _names_by_key_order(self, bucket: Bucket) -> list[str]:
        return [
            key[len(COLUMN_KEY_PREFIX):].decode("utf-8")
            for key, _ in bucket.items(COLUMN_KEY_PREFIX)
        ]
