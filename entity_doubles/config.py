"""Configuration loading for entity doubles.

This module provides centralized configuration management:
- Load settings from ENTITY_DOUBLES_* environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Entity double configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support. A test suite can select the back-end and the
    default leniency without touching test code.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENTITY_DOUBLES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Double construction
    backend: Literal["mock", "fake"] = Field(
        default="mock",
        description="Back-end creating the concrete doubles",
    )
    lenient_by_default: bool = Field(
        default=False,
        description="Build every double in lenient mode",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @field_validator("backend", "log_format", mode="before")
    @classmethod
    def normalize_lowercase(cls, v: str) -> str:
        """Accept values in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
