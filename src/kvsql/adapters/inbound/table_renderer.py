"""Renders execution results as aligned ASCII tables.

    +-------+-----+
    | name  | age |
    +-------+-----+
    | Alice | 30  |
    +-------+-----+
    1 row(s) returned
"""

from __future__ import annotations

import sys
from typing import TextIO

from kvsql.ports.inbound import ExecutionResult


class TableRenderer:
    """Writes results to a text stream.

    Queries print as a table followed by a row count, other statements
    print their status message, and failures print ``Error: <message>``.
    """

    def __init__(self, output: TextIO | None = None, max_col_width: int = 50) -> None:
        self._output = output or sys.stdout
        self._max_col_width = max_col_width

    def render(self, result: ExecutionResult) -> None:
        """Render one result."""
        if not result.success:
            self.render_error(result.message)
        elif result.is_query:
            self.render_table(result.columns, [row.values for row in result.rows])
        elif result.message:
            self._print(result.message)

    def render_error(self, message: str) -> None:
        self._print(f"Error: {message}")

    def render_table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Render ``rows`` under ``headers``; values are already strings."""
        cells = [[self._clip(v) for v in row] for row in rows]
        widths = [len(self._clip(h)) for h in headers]
        for row in cells:
            for i, value in enumerate(row):
                widths[i] = max(widths[i], len(value))

        separator = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
        self._print(separator)
        self._print(self._line(widths, [self._clip(h) for h in headers]))
        self._print(separator)
        for row in cells:
            self._print(self._line(widths, row))
        if cells:
            self._print(separator)
        self._print(f"{len(cells)} row(s) returned")

    def _clip(self, value: str) -> str:
        if len(value) > self._max_col_width:
            return value[: self._max_col_width - 3] + "..."
        return value

    @staticmethod
    def _line(widths: list[int], values: list[str]) -> str:
        return "|" + "|".join(f" {v:<{w}} " for v, w in zip(values, widths)) + "|"

    def _print(self, text: str) -> None:
        print(text, file=self._output)
