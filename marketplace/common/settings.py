"""
Application settings loaded from environment variables.
It centralizes the process-level configuration shared by the API, the logging setup, and the admin scripts.
Only the database URL and the session token secret/expiry are mandatory; everything else has a local default.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = (
    "DATABASE_URL",
    "JWT_SECRET",
    "JWT_EXPIRES",
)


class Settings(BaseModel):
    """Typed runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    PROJECT_NAME: str = "service-booking-marketplace"
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_EXPIRES: int
    PORT: int = 5000


def load_settings(*, load_env: bool = True) -> Settings:
    """Load and validate environment settings from `.env` and process environment."""

    if load_env:
        load_dotenv()

    missing = [key for key in REQUIRED_ENV_VARS if not os.getenv(key)]
    if missing:
        missing_values = ", ".join(sorted(missing))
        raise RuntimeError(
            f"Missing required environment variables: {missing_values}. "
            "Populate these values in `.env` before starting the application."
        )

    try:
        return Settings.model_validate(dict(os.environ))
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor for application settings."""

    return load_settings()
