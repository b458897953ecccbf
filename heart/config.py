"""
Heart: Application Configuration

Loads all configuration from environment variables (and an optional .env file)
using Pydantic Settings.  A cached ``get_settings()`` helper is provided so that
FastAPI dependency-injection (and any other call-site) always receives the same
validated instance without re-parsing the environment on every request.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Heart dating backend."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Database – Cloud SQL via Unix socket, or a plain URL
    # ------------------------------------------------------------------ #
    DATABASE_URL: str
    DB_USER: str = "heart_user"
    DB_PASSWORD: str = ""
    DB_NAME: str = "heart"
    CLOUD_SQL_INSTANCE_CONNECTION: str = ""
    CLOUD_SQL_USE_UNIX_SOCKET: bool = True

    # ------------------------------------------------------------------ #
    # Runtime environment
    # ------------------------------------------------------------------ #
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = ""
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # ------------------------------------------------------------------ #
    # CORS
    # ------------------------------------------------------------------ #
    ALLOWED_ORIGINS: str = "http://localhost:8080"

    # ------------------------------------------------------------------ #
    # Photo blob store (GCS when a bucket is configured, else local disk)
    # ------------------------------------------------------------------ #
    GCP_PROJECT_ID: str = ""
    GCS_BUCKET_NAME: str = ""
    MEDIA_ROOT: str = "images"
    PHOTO_MAX_BYTES: int = 5 * 1024 * 1024
    PHOTO_CONTENT_TYPES: str = "image/jpeg,image/png,image/webp,image/gif"

    # ------------------------------------------------------------------ #
    # Discovery
    # ------------------------------------------------------------------ #
    PROFILE_PAGE_SIZE: int = 50

    # ------------------------------------------------------------------ #
    # Derived helpers
    # ------------------------------------------------------------------ #
    @property
    def allowed_origins_list(self) -> list[str]:
        """Return ALLOWED_ORIGINS as a list split on commas."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def photo_content_types_list(self) -> list[str]:
        return [t.strip() for t in self.PHOTO_CONTENT_TYPES.split(",") if t.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)

    @field_validator("LOG_LEVEL")
    @classmethod
    def _log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {v!r}")
        return level

    @field_validator("PROFILE_PAGE_SIZE", "PHOTO_MAX_BYTES")
    @classmethod
    def _must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached, validated ``Settings`` instance.

    Using ``@lru_cache`` guarantees the .env file is read and validated
    exactly once per process lifetime.  Import this function anywhere you
    need access to configuration::

        from heart.config import get_settings
        settings = get_settings()
    """
    return Settings()  # type: ignore[call-arg]
