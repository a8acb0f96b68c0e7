"""Unit tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from kvsql.infrastructure.config import Config, StorageConfig, get_config


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.storage.data_dir == Path("Dbs")
        assert config.storage.file_suffix == ".db"
        assert config.storage.backend == "sqlite"
        assert config.shell.prompt == "> "
        assert config.observability.log_level == "WARNING"
        assert config.observability.metrics_port is None

    def test_database_path(self, temp_dir: Path) -> None:
        """Each database lives in <data_dir>/<name><suffix>."""
        config = Config(storage=StorageConfig(data_dir=temp_dir))

        assert config.database_path("shop") == temp_dir / "shop.db"

    def test_ensure_directories(self, temp_dir: Path) -> None:
        """Test that ensure_directories creates the data directory."""
        config = Config(storage=StorageConfig(data_dir=temp_dir / "nested" / "Dbs"))

        config.ensure_directories()

        assert config.storage.data_dir.is_dir()

    def test_memory_backend_creates_nothing(self, temp_dir: Path) -> None:
        """The memory backend never touches the data directory."""
        config = Config(storage=StorageConfig(data_dir=temp_dir / "Dbs", backend="memory"))

        config.ensure_directories()

        assert not config.storage.data_dir.exists()

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        """Nested settings are read from KVSQL_<SECTION>__<FIELD>."""
        monkeypatch.setenv("KVSQL_STORAGE__DATA_DIR", str(temp_dir))
        monkeypatch.setenv("KVSQL_OBSERVABILITY__LOG_LEVEL", "DEBUG")

        config = Config()

        assert config.storage.data_dir == temp_dir
        assert config.observability.log_level == "DEBUG"

    def test_invalid_lock_timeout(self) -> None:
        """Test that a non-positive lock timeout raises validation error."""
        with pytest.raises(ValueError):
            StorageConfig(lock_timeout_seconds=0)

    def test_invalid_suffix(self) -> None:
        """A file suffix must start with a dot."""
        with pytest.raises(ValueError):
            StorageConfig(file_suffix="db")


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2
