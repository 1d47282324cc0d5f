"""
Configuration for the MemoryMesh graph core.

Settings are read from environment variables via pydantic-settings. Each
group has its own prefix:

    MEMORYMESH_STORAGE_*  - location and write mode of the JSON Lines file
    MEMORYMESH_LOG_*      - logging level for the core's module loggers
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_DIR = Path.home() / ".memorymesh"
DEFAULT_MEMORY_FILE = "memory.jsonl"


class StorageSettings(BaseSettings):
    """Where the graph is persisted and how it is written."""

    model_config = SettingsConfigDict(env_prefix="MEMORYMESH_STORAGE_", extra="ignore")

    base_dir: Path = Field(default=DEFAULT_BASE_DIR, description="Directory holding the memory file")
    memory_file: Path = Field(
        default=Path(DEFAULT_MEMORY_FILE),
        description="JSON Lines file; relative paths are resolved against base_dir",
    )
    atomic_writes: bool = Field(
        default=False,
        description="Write to a temporary file and replace the memory file instead of overwriting in place",
    )
    encoding: str = "utf-8"

    @field_validator("base_dir", "memory_file", mode="after")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()

    @property
    def memory_path(self) -> Path:
        """Absolute or base_dir-relative path of the memory file."""
        if self.memory_file.is_absolute():
            return self.memory_file
        return self.base_dir / self.memory_file


class LoggingSettings(BaseSettings):
    """Log level applied to the ``memorymesh`` logger hierarchy."""

    model_config = SettingsConfigDict(env_prefix="MEMORYMESH_LOG_", extra="ignore")

    level: str = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> str:
        name = str(v).strip().upper()
        if name not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return name

    def apply(self) -> None:
        """Set the level on the package logger (handlers are left to the host process)."""
        logging.getLogger("memorymesh").setLevel(self.level)


class Settings(BaseSettings):
    """Aggregate of all MemoryMesh settings groups."""

    model_config = SettingsConfigDict(extra="ignore")

    storage: StorageSettings = Field(default_factory=StorageSettings)
    log: LoggingSettings = Field(default_factory=LoggingSettings)


settings = Settings()
