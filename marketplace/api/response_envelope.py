# This file builds response envelopes for API endpoints in a consistent format.
# It exists so clients always receive `success`, version metadata, and request tracing fields.
# The helpers return plain dictionaries that Pydantic response models validate at runtime.
# Every envelope key is set explicitly so routes serialized with `exclude_unset` keep them.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import Request

from marketplace.api.api_config import ApiConfig
from marketplace.api.schema_versions import build_version_fields


def generated_at_timestamp() -> datetime:
    """Return timezone-aware UTC timestamp for response generation."""

    return datetime.now(tz=UTC)


def _base_fields(*, config: ApiConfig, request: Request, message: str | None) -> dict[str, Any]:
    return {
        "success": True,
        "message": message,
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": str(getattr(request.state, "request_id", "unknown")),
        "generated_at": generated_at_timestamp(),
    }


def build_list_envelope(
    *,
    config: ApiConfig,
    request: Request,
    data: list[dict[str, Any]],
    pagination: dict[str, Any] | None = None,
    message: str | None = None,
) -> dict[str, Any]:
    """Build standard list response envelope."""

    payload = {
        **_base_fields(config=config, request=request, message=message),
        "count": len(data),
        "data": data,
    }
    if pagination is not None:
        payload["pagination"] = pagination
    return payload


def build_object_envelope(
    *,
    config: ApiConfig,
    request: Request,
    data: dict[str, Any] | None = None,
    message: str | None = None,
    key: str = "data",
) -> dict[str, Any]:
    """Build standard non-list response envelope."""

    payload = _base_fields(config=config, request=request, message=message)
    if data is not None:
        payload[key] = data
    return payload
