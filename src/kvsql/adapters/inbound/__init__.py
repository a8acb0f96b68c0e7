"""Inbound adapters for kvsql.

Inbound adapters handle incoming statements and convert them to
internal domain operations.

Exports:
    - StatementParser: Turns statement text into typed commands
    - Shell: Line-oriented interactive loop
    - TableRenderer: Prints results as ASCII tables
"""

from kvsql.adapters.inbound.shell import Shell
from kvsql.adapters.inbound.statement_parser import StatementParser
from kvsql.adapters.inbound.table_renderer import TableRenderer

__all__ = [
    "StatementParser",
    "Shell",
    "TableRenderer",
]
