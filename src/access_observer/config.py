"""
config.py — pydantic-settings Settings class.

Environment variables understood by access-observer are declared here.
The middleware and the logging helpers import `settings` from this module.

Usage:
    from access_observer.config import settings
    print(settings.request_log_level)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")
    logger_name: str = Field(default="access_observer.access")

    # -------------------------------------------------------------------------
    # Access records
    # -------------------------------------------------------------------------
    request_log_level: str = Field(default="info")
    error_log_level: str = Field(default="error")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @field_validator("request_log_level", "error_log_level", mode="before")
    @classmethod
    def lower_severity(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton — import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
