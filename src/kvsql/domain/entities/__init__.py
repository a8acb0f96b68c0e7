"""Domain entities for kvsql.

Exports:
    Commands:
        - Command: Base class of all parsed statements
        - CommandKind: Statement kind tag
        - CreateDatabase, UseDatabase, CreateTable, Insert, Select,
          Update, Delete, DropTable: One class per statement

    Schema:
        - ColumnDefinition: Column name plus verbatim definition text

    Rows:
        - TableRow: Row reassembled from its cells
"""

from kvsql.domain.entities.column import ColumnDefinition
from kvsql.domain.entities.command import (
    Command,
    CommandKind,
    CreateDatabase,
    CreateTable,
    Delete,
    DropTable,
    Insert,
    Select,
    Update,
    UseDatabase,
)
from kvsql.domain.entities.table_row import TableRow

__all__ = [
    # Commands
    "Command",
    "CommandKind",
    "CreateDatabase",
    "UseDatabase",
    "CreateTable",
    "Insert",
    "Select",
    "Update",
    "Delete",
    "DropTable",
    # Schema
    "ColumnDefinition",
    # Rows
    "TableRow",
]
