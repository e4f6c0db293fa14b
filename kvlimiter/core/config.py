"""Service configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

These settings only drive the HTTP service and the store factory. The
limiter itself receives explicit arguments and validates them on its own.
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
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first.
if _env_file and not os.getenv("TESTING"):
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class LimiterSettings(BaseSettings):
    """Sliding window limiter parameters used by the HTTP service.

    Per-field bounds are checked when settings load; cross-field rules such
    as interval <= period are checked when the limiter is constructed.
    """

    limit: int = Field(
        10,
        ge=1,
        description="Maximum accepted requests per window",
    )
    period: int = Field(
        60,
        ge=60,
        description="Window length in seconds; also the KV record TTL",
    )
    interval: int = Field(
        0,
        ge=0,
        description="Minimum seconds between two accepted requests (0 disables)",
    )
    prefix: str = Field(
        "ratelimit:",
        description="Namespace prepended to every stored key",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATELIMIT_",
        case_sensitive=False,
    )


class StoreSettings(BaseSettings):
    """KV store backend selection and connection details."""

    backend: str = Field(
        "memory",
        description="Store backend: memory, redis or cloudflare",
    )
    redis_url: str | None = Field(
        None,
        description="Redis connection URL (required for the redis backend)",
    )
    cf_account_id: str | None = Field(
        None,
        description="Cloudflare account id (required for the cloudflare backend)",
    )
    cf_namespace_id: str | None = Field(
        None,
        description="Workers KV namespace id (required for the cloudflare backend)",
    )
    cf_api_token: str | None = Field(
        None,
        description="Cloudflare API token with Workers KV read/write permission",
    )
    cf_base_url: str = Field(
        "https://api.cloudflare.com/client/v4",
        description="Cloudflare API base URL",
    )
    timeout_seconds: float = Field(
        5.0,
        description="Network timeout for remote store backends",
    )

    model_config = SettingsConfigDict(
        env_prefix="KV_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    rate_limit_enabled: bool = Field(
        True,
        description="Enforce the limiter on protected routes",
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    api_key_required: bool = Field(
        True,
        description="Whether the admin endpoints require an API key",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Nested settings are created via default_factory so env loading works
    for each section independently.
    """

    app_env: str = APP_ENV
    limiter: LimiterSettings = Field(default_factory=LimiterSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
