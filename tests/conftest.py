"""Pytest configuration and fixtures for kvsql tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from kvsql.adapters.outbound import InMemoryKeyValueStore, SqliteKeyValueStore
from kvsql.application import QueryEngine
from kvsql.infrastructure.config import Config, StorageConfig
from kvsql.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with a temporary data directory."""
    return Config(
        storage=StorageConfig(
            data_dir=temp_dir / "Dbs",
            lock_timeout_seconds=0.5,
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def memory_store() -> Generator[InMemoryKeyValueStore, None, None]:
    """Provide an empty in-memory store."""
    store = InMemoryKeyValueStore()
    yield store
    store.close()


@pytest.fixture
def sqlite_store(temp_dir: Path) -> Generator[SqliteKeyValueStore, None, None]:
    """Provide an empty SQLite-backed store."""
    store = SqliteKeyValueStore(temp_dir / "store.db")
    yield store
    store.close()


@pytest.fixture
def engine(
    test_config: Config, metrics_registry: MetricsRegistry
) -> Generator[QueryEngine, None, None]:
    """Provide a query engine over a temporary data directory."""
    with QueryEngine(config=test_config, metrics=metrics_registry) as e:
        yield e


@pytest.fixture
def shop(engine: QueryEngine) -> QueryEngine:
    """Provide an engine with database 'shop' selected and a users table."""
    assert engine.execute("CREATE DATABASE shop").success
    assert engine.execute("CREATE TABLE users (name text, age text)").success
    return engine


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
