"""Interactive shell.

Reads one statement per line, hands it to the query service and renders
the result. ``EXIT`` (any case, optional ``;``) or end of input closes the
active database and ends the loop.
"""

from __future__ import annotations

import sys
from typing import TextIO

from kvsql.adapters.inbound.table_renderer import TableRenderer
from kvsql.infrastructure.logging import get_logger
from kvsql.ports.inbound import QueryService

logger = get_logger(__name__)

EXIT_COMMAND = "EXIT"


class Shell:
    """Line-oriented read-execute-print loop.

    Usage:
        shell = Shell(engine, TableRenderer())
        exit_code = shell.run()
    """

    def __init__(
        self,
        service: QueryService,
        renderer: TableRenderer | None = None,
        input: TextIO | None = None,
        output: TextIO | None = None,
        prompt: str = "> ",
    ) -> None:
        self._service = service
        self._input = input or sys.stdin
        self._output = output or sys.stdout
        self._renderer = renderer or TableRenderer(self._output)
        self._prompt = prompt

    def run(self) -> int:
        """Run until EXIT or end of input.

        Returns:
            Process exit code.

        Raises:
            DatabaseOpenError: If a database file cannot be opened.
        """
        try:
            while True:
                self._output.write(self._prompt)
                self._output.flush()

                line = self._input.readline()
                if not line:
                    # End of input
                    self._output.write("\n")
                    break

                if self.is_exit(line):
                    break

                self._renderer.render(self._service.execute(line))
        finally:
            self._service.close()

        logger.debug("shell_exited")
        return 0

    @staticmethod
    def is_exit(line: str) -> bool:
        return line.strip().rstrip(";").strip().upper() == EXIT_COMMAND
