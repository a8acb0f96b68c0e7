"""Row codec: one key-value pair per (row id, column).

A row with id 7 and cells name=Alice, age=30 is stored as

    7:name -> Alice
    7:age  -> 30

Row ids come from the bucket's sequence counter, so they are never reused,
even after the row is deleted, and they survive restarts.
"""

from __future__ import annotations

from kvsql.domain.entities import TableRow
from kvsql.domain.value_objects import CellKey, RowId, is_schema_key
from kvsql.infrastructure.logging import get_logger
from kvsql.ports.outbound import Bucket

logger = get_logger(__name__)


class RowCodec:
    """Encodes rows into cells and reassembles them on scan."""

    def next_row_id(self, bucket: Bucket) -> RowId:
        """Draw the next row id from the table's sequence counter."""
        return RowId(bucket.next_sequence())

    def put_cell(self, bucket: Bucket, row_id: RowId, column: str, value: str) -> None:
        """Write one cell."""
        bucket.put(CellKey(row_id, column).to_bytes(), value.encode("utf-8"))

    def scan_rows(self, bucket: Bucket) -> list[TableRow]:
        """Materialize every row of the table, ordered by row id.

        Keys that do not decode as ``<row id>:<column>`` are skipped.
        """
        rows: dict[RowId, TableRow] = {}
        for key, value in bucket.items():
            if is_schema_key(key):
                continue
            try:
                cell = CellKey.from_bytes(key)
            except ValueError:
                logger.debug("skipping_malformed_key", table=bucket.name, key=repr(key))
                continue

            row = rows.get(cell.row_id)
            if row is None:
                row = rows[cell.row_id] = TableRow(row_id=cell.row_id)
            row.cells[cell.column] = value.decode("utf-8", errors="replace")

        return [rows[row_id] for row_id in sorted(rows)]

    def delete_row(self, bucket: Bucket, row: TableRow) -> int:
        """Delete every cell of ``row``.

        Returns:
            Number of cells deleted
        """
        keys = row.cell_keys()
        for key in keys:
            bucket.delete(key.to_bytes())
        return len(keys)
