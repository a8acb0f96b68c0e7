"""Configuration management for the query engine."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Storage configuration."""

    data_dir: Path = Field(default=Path("Dbs"), description="Directory holding database files")
    file_suffix: str = Field(
        default=".db", pattern=r"^\.[A-Za-z0-9_]+$", description="Database file suffix"
    )
    backend: Literal["sqlite", "memory"] = Field(
        default="sqlite", description="Key-value store backend"
    )
    lock_timeout_seconds: float = Field(
        default=1.0, gt=0, le=300, description="Seconds to wait for the database file lock"
    )


class ShellConfig(BaseModel):
    """Interactive shell configuration."""

    prompt: str = Field(default="> ", description="Prompt printed before each statement")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="kvsql", description="Service name for tracing")
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (disabled if unset)"
    )


class Config(BaseSettings):
    """Main configuration for kvsql."""

    model_config = SettingsConfigDict(
        env_prefix="KVSQL_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the data directory exists."""
        if self.storage.backend == "sqlite":
            self.storage.data_dir.mkdir(parents=True, exist_ok=True)

    def database_path(self, name: str) -> Path:
        """Return the file path backing the database called ``name``."""
        return self.storage.data_dir / f"{name}{self.storage.file_suffix}"


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
