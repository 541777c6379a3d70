# This file provides shared helpers for API endpoint tests.
# Each client gets its own in-memory SQLite store, so tests never share accounts or records.
# The helpers build consistent config objects, scoped TestClient contexts, and seeded accounts.
# Centralized test wiring keeps API tests small and focused on behavior.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi.testclient import TestClient

from marketplace.api.api_config import ApiConfig
from marketplace.api.app import create_app
from marketplace.api.db_access import DatabaseClient
from marketplace.api.services.auth_service import AuthService

DEFAULT_PASSWORD = "secret123"


def build_test_config(**overrides: Any) -> ApiConfig:
    """Create deterministic API config for tests."""

    values: dict[str, Any] = {
        "api_name": "Test Marketplace API",
        "api_version_path": "/api/v1",
        "schema_version": "1.0.0",
        "host": "0.0.0.0",
        "port": 5000,
        "environment": "test",
        "database_url": "sqlite+pysqlite:///:memory:",
        "jwt_secret": "test-secret",
        "jwt_expires_days": 30,
        "password_hash_rounds": 4,
        "default_page_size": 10,
        "max_page_size": 50,
        "enable_request_logging": False,
        "allowed_origins": [],
        "app_version": "0.1.0",
    }
    values.update(overrides)
    return ApiConfig(**values)


class FakeDBClient:
    """Store stand-in for readiness tests that need a disconnected database."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self._connected = connected
        self._tables = existing_tables if existing_tables is not None else {"users", "services", "bookings"}

    def create_schema(self) -> None:
        return None

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables

    def dispose(self) -> None:
        return None


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    db_client: Any | None = None,
    raise_server_exceptions: bool = True,
) -> Iterator[TestClient]:
    """Yield a TestClient bound to a freshly built app and store."""

    resolved_config = config or build_test_config()
    resolved_db = db_client or DatabaseClient(database_url=resolved_config.database_url)
    app = create_app(config=resolved_config, db_client=resolved_db)

    with TestClient(app, raise_server_exceptions=raise_server_exceptions) as client:
        yield client


def service_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": "Deep house cleaning",
        "description": "Full apartment clean including kitchen and bathrooms.",
        "category": "cleaning",
        "price": 80,
        "duration": 120,
        "availability": {
            "days": ["Monday", "Wednesday", "Friday"],
            "startTime": "09:00",
            "endTime": "17:00",
        },
    }
    payload.update(overrides)
    return payload


def signup(
    client: TestClient,
    *,
    name: str = "Alex",
    email: str,
    role: str | None = None,
    password: str = DEFAULT_PASSWORD,
) -> dict[str, Any]:
    """Sign up through the API; the client keeps the session cookie."""

    body: dict[str, Any] = {"name": name, "email": email, "password": password}
    if role is not None:
        body["role"] = role
    response = client.post("/api/v1/auth/signup", json=body)
    assert response.status_code == 201, response.text
    return response.json()["user"]


def login(client: TestClient, *, email: str, password: str = DEFAULT_PASSWORD) -> dict[str, Any]:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["user"]


def seed_admin(client: TestClient, *, email: str = "admin@marketplace.io") -> dict[str, Any]:
    """Insert an admin account the way the admin script does, then log in as it."""

    app = client.app
    service = AuthService(config=app.state.config, db=app.state.db)
    service.create_user(name="Admin", email=email, password=DEFAULT_PASSWORD, role="admin")
    return login(client, email=email)


def create_service(client: TestClient, **overrides: Any) -> dict[str, Any]:
    response = client.post("/api/v1/service/create-service", json=service_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]
