# This file defines the API error taxonomy and the single translator from errors to HTTP responses.
# It exists so every endpoint returns the same error shape with request trace fields.
# Each fault kind (validation, auth, permission, missing record, conflict, internal) has its own class.
# Unexpected exceptions are logged server-side and collapsed into a generic 500 without leaking details.

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.api.schemas.common import ErrorResponse

LOGGER = logging.getLogger("api")


class APIError(Exception):
    """Domain error type with structured API details."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationFailed(APIError):
    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(
            status_code=400, error_code="VALIDATION_ERROR", message=message, details=details
        )


class Unauthorized(APIError):
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "User unauthorized") -> None:
        super().__init__(status_code=401, error_code=type(self).error_code, message=message)


class TokenExpired(Unauthorized):
    error_code = "TOKEN_EXPIRED"

    def __init__(self, message: str = "Session expired, please log in again") -> None:
        super().__init__(message)


class TokenInvalid(Unauthorized):
    error_code = "TOKEN_INVALID"

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class TokenMalformed(Unauthorized):
    error_code = "TOKEN_MALFORMED"

    def __init__(self, message: str = "Malformed token") -> None:
        super().__init__(message)


class Forbidden(APIError):
    def __init__(self, message: str = "Unauthorized access") -> None:
        super().__init__(status_code=403, error_code="FORBIDDEN", message=message)


class NotFound(APIError):
    def __init__(self, message: str) -> None:
        super().__init__(status_code=404, error_code="NOT_FOUND", message=message)


class Conflict(APIError):
    def __init__(self, message: str) -> None:
        super().__init__(status_code=409, error_code="CONFLICT", message=message)


class InternalError(APIError):
    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(status_code=500, error_code="INTERNAL_SERVER_ERROR", message=message)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def _error_body(
    *, request: Request, error_code: str, message: str, details: Any | None = None
) -> dict[str, Any]:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        request_id=_request_id(request),
        timestamp=datetime.now(tz=UTC),
    )
    return body.model_dump(mode="json")


def _first_validation_message(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request."
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body must be valid JSON."
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    message = str(first.get("msg", "Invalid value"))
    return f"{field}: {message}" if field else message


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        if exc.status_code >= 500:
            LOGGER.error("api error path=%s code=%s", request.url.path, exc.error_code)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code=exc.error_code,
                message=exc.message,
                details=exc.details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = list(exc.errors())
        return JSONResponse(
            status_code=400,
            content=_error_body(
                request=request,
                error_code="VALIDATION_ERROR",
                message=_first_validation_message(errors),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code="HTTP_ERROR",
                message=str(exc.detail),
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception(
            "unhandled error method=%s path=%s request_id=%s",
            request.method,
            request.url.path,
            _request_id(request),
            exc_info=exc,
        )
        error = InternalError()
        return JSONResponse(
            status_code=error.status_code,
            content=_error_body(
                request=request,
                error_code=error.error_code,
                message=error.message,
            ),
        )
