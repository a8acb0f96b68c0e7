"""Query Executor - runs typed commands against the active database.

Every mutating statement runs inside exactly one write transaction and
every SELECT inside one read transaction, so a statement either applies
completely or not at all.

Table layout (one bucket per table):

    col:<name>          column definition
    meta:columns        declared column order
    <row_id>:<column>   cell value
"""

from __future__ import annotations

from kvsql.application.session import Session
from kvsql.domain.entities import (
    Command,
    CreateDatabase,
    CreateTable,
    Delete,
    DropTable,
    Insert,
    Select,
    TableRow,
    Update,
    UseDatabase,
)
from kvsql.domain.errors import (
    KvSqlError,
    NoActiveDatabaseError,
    StorageError,
    TableNotFoundError,
)
from kvsql.domain.services import RowCodec, SchemaCodec
from kvsql.domain.value_objects import FilterExpression
from kvsql.infrastructure.logging import get_logger
from kvsql.ports.inbound import ExecutionResult, Row
from kvsql.ports.outbound import (
    Bucket,
    BucketNotFoundError,
    KeyValueStoreError,
    Transaction,
)

logger = get_logger(__name__)


class QueryExecutor:
    """Executes parsed commands.

    Domain errors raised while executing propagate to the caller; storage
    errors are translated into ``StorageError`` (``TableNotFoundError`` for
    a missing bucket). The write transaction is rolled back in both cases.
    """

    def __init__(
        self,
        session: Session,
        schema_codec: SchemaCodec | None = None,
        row_codec: RowCodec | None = None,
    ) -> None:
        self._session = session
        self._schema = schema_codec or SchemaCodec()
        self._rows = row_codec or RowCodec()

    def execute(self, command: Command) -> ExecutionResult:
        """Execute a command.

        Args:
            command: The parsed command.

        Returns:
            ExecutionResult with rows (SELECT) or a status message.

        Raises:
            KvSqlError: On any per-statement failure.
            DatabaseOpenError: If CREATE DATABASE/USE cannot open the file.
        """
        if command.requires_database and not self._session.has_database:
            raise NoActiveDatabaseError()

        try:
            if isinstance(command, CreateDatabase):
                return self._execute_create_database(command)
            elif isinstance(command, UseDatabase):
                return self._execute_use(command)
            elif isinstance(command, CreateTable):
                return self._execute_create_table(command)
            elif isinstance(command, Insert):
                return self._execute_insert(command)
            elif isinstance(command, Select):
                return self._execute_select(command)
            elif isinstance(command, Update):
                return self._execute_update(command)
            elif isinstance(command, Delete):
                return self._execute_delete(command)
            elif isinstance(command, DropTable):
                return self._execute_drop_table(command)
        except BucketNotFoundError as e:
            raise TableNotFoundError(e.name) from e
        except KeyValueStoreError as e:
            raise StorageError(str(e)) from e

        raise KvSqlError(f"unsupported command: {type(command).__name__}")

    def _execute_create_database(self, command: CreateDatabase) -> ExecutionResult:
        self._session.use(command.name)
        return ExecutionResult(message=f"Database {command.name} created and selected")

    def _execute_use(self, command: UseDatabase) -> ExecutionResult:
        self._session.use(command.name)
        return ExecutionResult(message=f"Using database {command.name}")

    def _execute_create_table(self, command: CreateTable) -> ExecutionResult:
        with self._session.store.update() as tx:
            bucket = tx.create_bucket_if_not_exists(command.table)
            for column in command.columns:
                self._schema.define_column(bucket, column)

        logger.info("table_created", table=command.table, columns=len(command.columns))
        return ExecutionResult(message=f"Table {command.table} created")

    def _execute_insert(self, command: Insert) -> ExecutionResult:
        with self._session.store.update() as tx:
            bucket = self._require_table(tx, command.table)
            row_id = self._rows.next_row_id(bucket)
            for column, value in command.cells():
                self._rows.put_cell(bucket, row_id, column, value)

        logger.debug("row_inserted", table=command.table, row_id=row_id)
        return ExecutionResult(
            affected_rows=1,
            message=f"Record inserted into table {command.table}",
        )

    def _execute_select(self, command: Select) -> ExecutionResult:
        with self._session.store.view() as tx:
            bucket = self._require_table(tx, command.table)
            if command.selects_all:
                headers = self._schema.column_names(bucket)
            else:
                headers = list(command.columns)
            matches = self._matching_rows(bucket, command.filter)

        rows = [Row(columns=headers, values=row.project(headers)) for row in matches]
        return ExecutionResult(rows=rows, columns=headers, is_query=True)

    def _execute_update(self, command: Update) -> ExecutionResult:
        with self._session.store.update() as tx:
            bucket = self._require_table(tx, command.table)
            matches = self._matching_rows(bucket, command.filter)
            for row in matches:
                self._rows.put_cell(bucket, row.row_id, command.column, command.value)

        logger.debug("rows_updated", table=command.table, count=len(matches))
        return ExecutionResult(
            affected_rows=len(matches),
            message=f"Table {command.table} updated ({len(matches)} row(s))",
        )

    def _execute_delete(self, command: Delete) -> ExecutionResult:
        with self._session.store.update() as tx:
            bucket = self._require_table(tx, command.table)
            # Resolve the full row set before deleting any cell
            matches = self._matching_rows(bucket, command.filter)
            for row in matches:
                self._rows.delete_row(bucket, row)

        logger.debug("rows_deleted", table=command.table, count=len(matches))
        return ExecutionResult(
            affected_rows=len(matches),
            message=f"Records deleted from table {command.table} ({len(matches)} row(s))",
        )

    def _execute_drop_table(self, command: DropTable) -> ExecutionResult:
        with self._session.store.update() as tx:
            tx.delete_bucket(command.table)

        logger.info("table_dropped", table=command.table)
        return ExecutionResult(message=f"Table {command.table} dropped")

    def _matching_rows(self, bucket: Bucket, where: FilterExpression) -> list[TableRow]:
        return [row for row in self._rows.scan_rows(bucket) if where.matches(row.cells)]

    @staticmethod
    def _require_table(tx: Transaction, table: str) -> Bucket:
        bucket = tx.bucket(table)
        if bucket is None:
            raise TableNotFoundError(table)
        return bucket
