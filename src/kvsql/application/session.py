"""Session - owns the active database handle.

At most one database is open at a time. Switching is close-then-open:
the previous store is closed before the next file is opened, so two
handles never coexist.
"""

from __future__ import annotations

import re
from pathlib import Path
from types import TracebackType

from kvsql.adapters.outbound.store_factory import StoreFactory, create_store_factory
from kvsql.domain.errors import (
    DatabaseOpenError,
    NoActiveDatabaseError,
    SchemaError,
    StorageError,
)
from kvsql.infrastructure.config import Config
from kvsql.infrastructure.logging import get_logger
from kvsql.infrastructure.metrics import MetricsRegistry
from kvsql.ports.outbound import KeyValueStore, KeyValueStoreError

logger = get_logger(__name__)

_INVALID_NAME = re.compile(r"[/\\\x00]")


class Session:
    """The currently selected database.

    Usage:
        with Session(config) as session:
            session.use("shop")
            with session.store.update() as tx:
                ...
    """

    def __init__(
        self,
        config: Config,
        store_factory: StoreFactory | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._config = config
        self._store_factory = store_factory or create_store_factory(config.storage)
        self._metrics = metrics
        self._store: KeyValueStore | None = None
        self._database_name: str | None = None

    @property
    def database_name(self) -> str | None:
        """Name of the active database, or None."""
        return self._database_name

    @property
    def has_database(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> KeyValueStore:
        """The active store.

        Raises:
            NoActiveDatabaseError: If no database has been selected.
        """
        if self._store is None:
            raise NoActiveDatabaseError()
        return self._store

    def use(self, name: str) -> Path:
        """Make ``name`` the active database, creating its file if needed.

        Args:
            name: Database name; the file is ``<data_dir>/<name><suffix>``.

        Returns:
            Path of the opened file.

        Raises:
            SchemaError: If the name cannot be used as a file name.
            DatabaseOpenError: If the file cannot be opened.
        """
        self.validate_name(name)
        path = self._config.database_path(name)

        self.close()

        try:
            self._config.ensure_directories()
            store = self._store_factory(path)
        except (KeyValueStoreError, OSError) as e:
            raise DatabaseOpenError(f"cannot open database {name}: {e}") from e

        self._store = store
        self._database_name = name
        if self._metrics is not None:
            self._metrics.database_switches_total.inc()
        logger.info("database_opened", database=name, path=str(path))
        return path

    def close(self) -> None:
        """Close the active database. Safe to call when none is open."""
        if self._store is None:
            return
        store, name = self._store, self._database_name
        self._store = None
        self._database_name = None
        try:
            store.close()
        except KeyValueStoreError as e:
            raise StorageError(f"cannot close database {name}: {e}") from e
        logger.info("database_closed", database=name)

    @staticmethod
    def validate_name(name: str) -> None:
        """Reject names that would escape the data directory."""
        if not name or name in (".", "..") or _INVALID_NAME.search(name):
            raise SchemaError(f"invalid database name '{name}'")

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
