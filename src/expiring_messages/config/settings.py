"""Expiring Messages configuration settings using pydantic-settings."""

from functools import cached_property
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DURATIONS = "5m,15m,1h,1d"


class Settings(BaseSettings):
    """Process settings for the expiration engine.

    Settings are loaded from environment variables with the
    EXPIRING_MESSAGES_ prefix. For example,
    EXPIRING_MESSAGES_ALLOWED_DURATIONS="5m,1h" restricts TTLs to two tokens.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPIRING_MESSAGES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Plugin behaviour (see PluginConfiguration)
    enabled: bool = True
    allowed_durations: str = DEFAULT_DURATIONS  # comma-separated, empty = any
    config_file: Path | None = None  # optional YAML overriding the two above

    # Storage
    store_path: Path = Path("~/.local/share/expiring-messages/kv.db")

    # Content server used for permanent deletes
    server_url: str = "http://localhost:8065"
    access_token: str | None = None
    request_timeout: float = 10.0

    # Scheduler
    sweep_interval: float = 60.0  # seconds between ticks
    page_size: int = 100
    sweep_max_pages: int = 10
    cleanup_max_pages: int = 100
    retention_hours: int = 24
    recover_on_start: bool = True

    # Logging
    log_level: str = "INFO"

    @field_validator("sweep_interval")
    @classmethod
    def validate_sweep_interval(cls, v: float) -> float:
        """Ensure the sweep interval is positive."""
        if v <= 0:
            raise ValueError("sweep_interval must be greater than 0")
        return v

    @field_validator("page_size", "sweep_max_pages", "cleanup_max_pages", "retention_hours")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Ensure paging and retention bounds are at least 1."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @cached_property
    def store_file(self) -> Path:
        """Return expanded store database path."""
        return self.store_path.expanduser()

    @cached_property
    def config_path(self) -> Path | None:
        """Return expanded plugin configuration file path."""
        if self.config_file is None:
            return None
        return self.config_file.expanduser()
