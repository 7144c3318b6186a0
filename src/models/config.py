"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_path: str = "data/uptime.db"
    log_level: str = "INFO"
    log_format: str = "console"
    default_confirmation_threshold: int = 2
    batch_max_workers: int = 4

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Ensure parent directory exists, creating it if necessary."""
        parent = Path(value).parent
        parent.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """Log format must be console or json."""
        lowered = value.lower()
        if lowered not in ("console", "json"):
            msg = "log_format must be one of console, json"
            raise ValueError(msg)
        return lowered

    @field_validator("default_confirmation_threshold")
    @classmethod
    def validate_default_confirmation_threshold(cls, value: int) -> int:
        """Confirmation threshold must be at least 1."""
        if value < 1:
            msg = "default_confirmation_threshold must be at least 1"
            raise ValueError(msg)
        return value

    @field_validator("batch_max_workers")
    @classmethod
    def validate_batch_max_workers(cls, value: int) -> int:
        """Batch worker count must be between 1 and 32."""
        if value < 1 or value > 32:
            msg = "batch_max_workers must be between 1 and 32"
            raise ValueError(msg)
        return value
