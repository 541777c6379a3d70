# This file tests API health, readiness, version, and metrics endpoints.
# It exists to validate operational contracts used by orchestration and monitoring.
# The tests confirm request IDs and version metadata are always returned.

from __future__ import annotations

from tests.api.support import FakeDBClient, api_test_client, build_test_config


def test_health_endpoint_returns_expected_fields() -> None:
    config = build_test_config()
    with api_test_client(config=config) as client:
        response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["environment"] == "test"
    assert payload["service_name"] == config.api_name
    assert payload["api_version"] == "v1"
    assert payload["schema_version"] == config.schema_version
    assert payload["request_id"]
    assert response.headers["x-request-id"] == payload["request_id"]
    assert "x-response-time-ms" in response.headers


def test_inbound_request_id_is_echoed() -> None:
    with api_test_client() as client:
        response = client.get("/health", headers={"x-request-id": "trace-123"})

    assert response.json()["request_id"] == "trace-123"
    assert response.headers["x-request-id"] == "trace-123"


def test_ready_endpoint_reports_tables_after_schema_creation() -> None:
    with api_test_client() as client:
        response = client.get("/ready")

    payload = response.json()
    assert payload["db_connected"] is True
    assert payload["tables_ready"] is True
    assert payload["ready"] is True
    assert payload["database"] == "reachable"


def test_ready_endpoint_reflects_unreachable_database() -> None:
    with api_test_client(db_client=FakeDBClient(connected=False)) as client:
        response = client.get("/ready")

    payload = response.json()
    assert payload["ready"] is False
    assert payload["tables_ready"] is False
    assert payload["database"] == "unreachable"


def test_version_endpoint_returns_version_metadata() -> None:
    config = build_test_config()
    with api_test_client(config=config) as client:
        response = client.get("/version")

    payload = response.json()
    assert response.status_code == 200
    assert payload["api_version_path"] == "/api/v1"
    assert payload["app_version"] == config.app_version
    assert payload["project"] == config.api_name


def test_metrics_endpoint_exposes_request_counters() -> None:
    with api_test_client() as client:
        client.get("/health")
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "api_http_requests_total" in response.text
    assert 'path="/health"' in response.text


def test_unknown_route_keeps_status_with_error_shape() -> None:
    with api_test_client() as client:
        response = client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    payload = response.json()
    assert payload["success"] is False
    assert payload["error_code"] == "HTTP_ERROR"
    assert payload["request_id"]


def test_unexpected_errors_become_generic_500() -> None:
    class ExplodingDBClient(FakeDBClient):
        def table_exists(self, table_name: str) -> bool:
            raise RuntimeError("boom")

    with api_test_client(db_client=ExplodingDBClient(), raise_server_exceptions=False) as client:
        response = client.get("/ready")

    assert response.status_code == 500
    assert response.json()["message"] == "Internal server error"
    assert "boom" not in response.text
