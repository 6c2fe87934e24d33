"""Client configuration using Pydantic Settings.

Configuration is environment-aware:
- REGISTRY_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from registry_client.core.errors import ConfigurationError


# Determine which environment to load (default: development)
REGISTRY_ENV = os.getenv("REGISTRY_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(REGISTRY_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class _RegistrySettings(BaseSettings):
    """BaseSettings that reports invalid values as ConfigurationError."""

    def __init__(self, **values: Any) -> None:
        try:
            super().__init__(**values)
        except ValidationError as exc:
            fields = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
            raise ConfigurationError(
                code="client_invalid_settings",
                message=f"Invalid {type(self).__name__}: {', '.join(fields)}",
                details={"fields": fields},
            ) from exc


def _build_client_settings() -> "ClientSettings":
    return ClientSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class ClientSettings(_RegistrySettings):
    """Registry API connection and rate limit configuration."""

    api_url: str = Field(
        "https://ismp.crpt.ru/api/v3",
        description="Base URL of the registration API",
    )
    request_limit: int = Field(
        10,
        description="Maximum number of outbound calls per interval (auth calls included)",
        ge=1,
    )
    interval_seconds: float = Field(
        1.0,
        description="Length of the fixed rate limit window in seconds",
        gt=0,
    )
    timeout_seconds: float = Field(
        30.0,
        description="Transport timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="REGISTRY_",
        case_sensitive=False,
    )


class LogSettings(_RegistrySettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(_RegistrySettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{REGISTRY_ENV} file.
    Invalid values raise ConfigurationError when the container is built.
    """

    registry_env: str = REGISTRY_ENV
    client: ClientSettings = Field(default_factory=_build_client_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment on first use.

    Raises:
        ConfigurationError: If an environment value is invalid.
    """

    return Settings()
