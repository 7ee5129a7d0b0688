"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (12-factor app)
  - Fall back to .env file
  - Validate types and constraints at startup

Only AppSettings is a BaseSettings instance. Sub-settings are plain
BaseModel classes populated via env_nested_delimiter="__", so the env var
HTTP__BASE_URL maps to http.base_url, HTTP__TIMEOUT_SECONDS to
http.timeout_seconds, etc.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class HttpSettings(BaseModel):
    """Where the episode service lives and how the transport talks to it."""

    base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL serving episodes.json and episodes/<id>.json",
    )
    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout")
    max_workers: int = Field(default=4, ge=1, le=64, description="Transport thread pool size")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Require an absolute http(s) URL; strip trailing slashes."""
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {value!r}")
        return value.rstrip("/")


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    http: HttpSettings = Field(default_factory=lambda: HttpSettings())
    episode_index: int = Field(default=0, ge=0, description="Which listed episode to load details for")
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level
