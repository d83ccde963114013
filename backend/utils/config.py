"""
FSPoll Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# so nested BaseSettings classes see the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


class WatcherSettings(BaseSettings):
    """Polling watcher defaults."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    interval_ms: int = Field(default=1000, ge=1, description="Delay between polls")
    buffer_size: int = Field(
        default=0,
        ge=0,
        description="Event channel capacity, 0 for a rendezvous channel",
    )
    keep_unreadable: bool = Field(
        default=False,
        description="Record metadata-less entries found by the initial scan",
    )
    stop_timeout: float = Field(
        default=5.0, ge=0.0, description="Seconds stop() waits for the poll loop"
    )

    @property
    def interval_seconds(self) -> float:
        """Poll interval in seconds."""
        return self.interval_ms / 1000.0


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Upper-case the level and reject unknown names."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        fmt = v.strip().lower()
        if fmt not in ("json", "console"):
            raise ValueError(f"unknown log format: {v}")
        return fmt


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="FSPoll")
    environment: str = Field(default="development")

    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() in ("development", "dev", "local")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Call ``get_settings.cache_clear()`` after changing the environment
    to pick up new values.
    """
    return Settings()
