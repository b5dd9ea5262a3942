"""
Configuration settings for the examdeck study platform.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Content
    # ========================================
    data_dir: Path = Field(
        default=Path("data"),
        description="Root directory of the exam content tree",
    )
    default_domain_order: int = Field(
        default=999,
        description="Sort order for guideline domains that declare none",
    )

    # ========================================
    # Study Session
    # ========================================
    quiz_advance_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Delay before moving on after the last quiz question",
    )
    state_file: Path = Field(
        default=Path.home() / ".examdeck" / "state.json",
        description="Client-side key-value file for studied pages and preferences",
    )
    studied_ttl_days: int = Field(
        default=365,
        ge=1,
        description="Days before persisted studied-page markers expire",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )
    cors_origins: str = Field(
        default="*",
        description="Comma separated list of allowed CORS origins",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def get_cors_origins(self) -> list[str]:
        """Return the configured CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Install the loguru sinks for the configured level and optional log file."""
    settings = settings or get_settings()

    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
