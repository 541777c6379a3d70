# This file defines liveness, readiness, and version endpoints for API operations.
# It exists so orchestration and monitoring systems can verify service health quickly.
# The readiness check confirms database connectivity and that the users/services/bookings tables exist.

from __future__ import annotations

import subprocess
from datetime import UTC, datetime

from fastapi import APIRouter, Request

from marketplace.api.db_access import REQUIRED_TABLES
from marketplace.api.dependencies import ConfigDep, DBDep
from marketplace.api.schema_versions import build_version_fields
from marketplace.api.schemas.health_schemas import HealthResponse, ReadinessResponse, VersionResponse

router = APIRouter(tags=["health"])


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _git_commit() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return completed.stdout.strip() or None


@router.get("/health", response_model=HealthResponse)
def health(request: Request, config: ConfigDep) -> dict[str, object]:
    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "status": "ok",
        "environment": config.environment,
        "service_name": config.api_name,
        "timestamp": _utc_now(),
    }


@router.get("/ready", response_model=ReadinessResponse)
def ready(request: Request, config: ConfigDep, db: DBDep) -> dict[str, object]:
    db_connected = db.can_connect()
    tables_ready = db_connected and all(db.table_exists(name) for name in REQUIRED_TABLES)

    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "db_connected": db_connected,
        "tables_ready": tables_ready,
        "ready": db_connected and tables_ready,
        "database": "reachable" if db_connected else "unreachable",
        "timestamp": _utc_now(),
    }


@router.get("/version", response_model=VersionResponse)
def version(request: Request, config: ConfigDep) -> dict[str, object]:
    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "api_version_path": config.api_version_path,
        "app_version": config.app_version,
        "git_commit": _git_commit(),
        "project": config.api_name,
        "version": config.app_version,
        "timestamp": _utc_now(),
    }
