"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Production may inject everything via real env vars
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on the signup endpoint",
    )
    rate_limit_requests: int = Field(
        3,
        description="Maximum number of signup attempts allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_sweep_interval_seconds: int = Field(
        300,
        description="How often expired rate limit windows are evicted from memory",
        ge=1,
    )

    early_bird_threshold: int = Field(
        100,
        description="Waitlist positions at or below this value get the early-bird email",
        ge=1,
    )
    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of origins allowed to call the API",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Relational store configuration."""

    url: str = Field(
        "sqlite:///./waitlist.db",
        description="SQLAlchemy database URL (e.g., postgresql+psycopg://...)",
    )
    echo: bool = Field(
        False,
        description="Echo SQL statements to the log",
    )

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        case_sensitive=False,
    )


class EmailSettings(BaseSettings):
    """Welcome email (Resend) configuration.

    When no API key is configured the service still accepts signups, it just
    logs and skips the welcome email.
    """

    api_key: str | None = Field(
        None,
        description="Resend API key; leave unset to disable outbound email",
    )
    from_email: str = Field(
        "Vendra <hello@vendra.ng>",
        description="Sender used for welcome emails",
    )
    max_workers: int = Field(
        2,
        description="Background threads available for sending notifications",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="RESEND_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read/propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file. Nested
    settings are created via default_factory so each group reads its own
    env prefix.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
