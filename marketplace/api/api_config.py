# This file defines runtime settings for the API layer in one place.
# It exists so versioning, session cookies, pagination, and hashing cost can be configured without code edits.
# The config loader starts from the required process settings and layers optional API_* variables on top.
# Validators reject unsafe values (bad version paths, unknown JWT algorithms, non-positive sizes) at startup.

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.common.settings import Settings, get_settings

_SUPPORTED_JWT_ALGORITHMS = {"HS256", "HS384", "HS512"}
_SAMESITE_VALUES = {"lax", "strict", "none"}


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Service Booking Marketplace API"
    api_version_path: str = "/api/v1"
    schema_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = "local"
    log_level: str = "INFO"
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int
    cookie_name: str = "token"
    cookie_secure: bool = False
    cookie_httponly: bool = True
    cookie_samesite: str = "lax"
    password_hash_rounds: int = 10
    default_page_size: int = 10
    max_page_size: int = 100
    default_service_sort: str = "-createdAt"
    enable_request_logging: bool = False
    auto_create_schema: bool = True
    allowed_origins: list[str] = Field(default_factory=list)
    app_version: str = "0.1.0"

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if len(parts) < 2 or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value.rstrip("/")

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("jwt_secret cannot be empty.")
        return value

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in _SUPPORTED_JWT_ALGORITHMS:
            supported = ", ".join(sorted(_SUPPORTED_JWT_ALGORITHMS))
            raise ValueError(f"jwt_algorithm must be one of: {supported}")
        return normalized

    @field_validator("cookie_samesite")
    @classmethod
    def validate_cookie_samesite(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in _SAMESITE_VALUES:
            raise ValueError("cookie_samesite must be 'lax', 'strict' or 'none'.")
        return normalized

    @field_validator("jwt_expires_days", "default_page_size", "max_page_size", "port")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    @field_validator("password_hash_rounds")
    @classmethod
    def validate_hash_rounds(cls, value: int) -> int:
        # bcrypt accepts cost factors 4..31
        if not 4 <= value <= 31:
            raise ValueError("password_hash_rounds must be between 4 and 31.")
        return value

    @property
    def session_ttl_seconds(self) -> int:
        return self.jwt_expires_days * 24 * 60 * 60


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_api_config(settings: Settings | None = None) -> ApiConfig:
    """Build API configuration from process settings and optional `API_*` variables."""

    resolved = settings or get_settings()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "Service Booking Marketplace API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/api/v1"),
        "schema_version": os.getenv("API_SCHEMA_VERSION", "1.0.0"),
        "host": os.getenv("API_HOST", "0.0.0.0"),
        "port": resolved.PORT,
        "environment": resolved.ENV,
        "log_level": resolved.LOG_LEVEL,
        "database_url": resolved.DATABASE_URL,
        "jwt_secret": resolved.JWT_SECRET,
        "jwt_algorithm": os.getenv("API_JWT_ALGORITHM", "HS256"),
        "jwt_expires_days": resolved.JWT_EXPIRES,
        "cookie_name": os.getenv("API_COOKIE_NAME", "token"),
        "cookie_secure": _env_bool("API_COOKIE_SECURE", False),
        "cookie_httponly": _env_bool("API_COOKIE_HTTPONLY", True),
        "cookie_samesite": os.getenv("API_COOKIE_SAMESITE", "lax"),
        "password_hash_rounds": _env_int("API_PASSWORD_HASH_ROUNDS", 10),
        "default_page_size": _env_int("API_DEFAULT_PAGE_SIZE", 10),
        "max_page_size": _env_int("API_MAX_PAGE_SIZE", 100),
        "default_service_sort": os.getenv("API_DEFAULT_SERVICE_SORT", "-createdAt"),
        "enable_request_logging": _env_bool("API_ENABLE_REQUEST_LOGGING", False),
        "auto_create_schema": _env_bool("API_AUTO_CREATE_SCHEMA", True),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "app_version": os.getenv("APP_VERSION", "0.1.0"),
    }
    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
