"""Runtime configuration for kidstats.

Values come from environment variables (or a ``.env`` file in the working
directory) and are read once per process through :func:`get_settings`.

Example:
    >>> from kidstats.config import get_settings
    >>> get_settings().database_url
    'sqlite:///data/kidstats.db'
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_DB = ":memory:"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """kidstats settings.

    Attributes:
        db_path: SQLite database file, or ``:memory:`` for a throwaway
            in-process database.
        sql_echo: Echo every SQL statement through the engine logger.
        log_level: Minimum level for console and file logs.
        log_dir: Directory for rotating log files.
        log_rotation: Loguru rotation rule for the log file.
        log_retention: How long rotated log files are kept.
        log_json: Write the log file as serialized JSON records.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: str = Field(default="data/kidstats.db", alias="KIDSTATS_DB_PATH")
    sql_echo: bool = Field(default=False, alias="KIDSTATS_SQL_ECHO")

    log_level: LogLevel = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    log_rotation: str = Field(default="1 day", alias="LOG_ROTATION")
    log_retention: str = Field(default="30 days", alias="LOG_RETENTION")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    @field_validator("db_path", "log_dir")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject blank paths."""
        if not v.strip():
            raise ValueError("Path cannot be empty or whitespace")
        return v.strip()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @property
    def is_memory_db(self) -> bool:
        return self.db_path == MEMORY_DB

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the configured database."""
        if self.is_memory_db:
            return "sqlite://"
        return f"sqlite:///{self.db_path}"

    @property
    def db_path_obj(self) -> Path:
        return Path(self.db_path)

    @property
    def log_dir_obj(self) -> Path:
        return Path(self.log_dir)

    def ensure_directories(self) -> None:
        """Create the database and log directories."""
        if not self.is_memory_db:
            self.db_path_obj.parent.mkdir(parents=True, exist_ok=True)
        self.log_dir_obj.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    return Settings()


def reset_settings() -> None:
    """Forget the loaded settings so the next call re-reads the environment."""
    get_settings.cache_clear()
