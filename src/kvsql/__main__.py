"""Command-line entry point.

Usage:
    kvsql [--data-dir DIR] [--database NAME] [--log-level LEVEL]
    kvsql -e "CREATE DATABASE shop" -e "USE shop"

Without ``--execute`` the interactive shell reads statements from standard
input until ``EXIT`` or end of input.

Exit codes:
    0   normal exit
    1   a database file could not be opened
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from kvsql import __version__
from kvsql.adapters.inbound import Shell, TableRenderer
from kvsql.application import QueryEngine
from kvsql.domain.errors import DatabaseOpenError
from kvsql.infrastructure import (
    Config,
    get_logger,
    get_metrics,
    setup_logging,
    setup_metrics,
    setup_tracing,
)

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kvsql",
        description="SQL-like shell over an embedded key-value store",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding database files (default: Dbs)",
    )
    parser.add_argument("--database", default=None, help="Database to open before the first prompt")
    parser.add_argument(
        "-e",
        "--execute",
        action="append",
        default=[],
        metavar="SQL",
        help="Execute a statement and exit (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Log level (default: WARNING)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Apply command-line overrides on top of the environment configuration."""
    config = Config()
    if args.data_dir is not None:
        storage = config.storage.model_copy(update={"data_dir": args.data_dir})
        config = config.model_copy(update={"storage": storage})
    if args.log_level is not None:
        observability = config.observability.model_copy(update={"log_level": args.log_level})
        config = config.model_copy(update={"observability": observability})
    return config


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = build_config(args)
    obs = config.observability

    setup_logging(level=obs.log_level, log_format=obs.log_format)
    if obs.metrics_port is not None:
        metrics = setup_metrics(port=obs.metrics_port)
    else:
        metrics = get_metrics()
    setup_tracing(obs)

    renderer = TableRenderer(sys.stdout)
    engine = QueryEngine(config=config, metrics=metrics)

    try:
        if args.database:
            result = engine.use(args.database)
            if not result.success:
                renderer.render(result)

        if args.execute:
            with engine:
                for statement in args.execute:
                    renderer.render(engine.execute(statement))
            return 0

        shell = Shell(engine, renderer, prompt=config.shell.prompt)
        return shell.run()
    except DatabaseOpenError as e:
        logger.critical("database_open_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        engine.close()
        return 1


if __name__ == "__main__":
    sys.exit(main())
