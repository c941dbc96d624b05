"""Application configuration with pydantic-settings.

All fields are optional with sensible defaults and can be overridden through
environment variables prefixed with ``APPFORGE_`` or a ``.env`` file.

Usage:
    from appforge.config import get_settings

    settings = get_settings()
    storage = open_storage(settings)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORAGE_KEY = "ai-code-generator-projects"


class Settings(BaseSettings):
    """appforge settings."""

    model_config = SettingsConfigDict(
        env_prefix="APPFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging configuration
    service_name: str = Field(
        default="appforge",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # Project storage
    storage_backend: Literal["memory", "file", "redis"] = Field(
        default="file",
        description="Key-value backend holding the project collection",
    )
    storage_path: Path = Field(
        default=Path.home() / ".appforge" / "storage.json",
        description="Document used by the file backend",
    )
    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        description="Namespaced key holding the serialized project collection",
    )
    storage_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Capacity of the file backend, in bytes",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL (required by the redis backend)",
        examples=["redis://localhost:6379/0"],
    )

    # Simulated generation timings
    step_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Time each project generation step is held",
    )
    chat_step_delay_seconds: float = Field(
        default=0.8,
        ge=0,
        description="Time each chat-triggered generation step is held",
    )
    chat_stream_delay_seconds: float = Field(
        default=0.02,
        ge=0,
        description="Delay between streamed characters of an assistant reply",
    )

    # Authenticated user for the CLI
    user_id: str | None = Field(default=None, description="Authenticated user id")
    user_email: str | None = Field(default=None, description="Authenticated user email")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
