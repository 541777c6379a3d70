# This file builds the FastAPI application and registers all API routers.
# It exists so startup behavior, middleware, and error handling are configured in one place.
# The factory owns the store handle: it is attached to `app.state`, its schema is created on startup
# when enabled, and it is disposed on shutdown.
# The app adds request IDs, timing headers, Prometheus metrics, and optional request logging.

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import RequestResponseEndpoint

from marketplace.api.api_config import ApiConfig, get_api_config
from marketplace.api.db_access import DatabaseClient
from marketplace.api.error_handlers import register_error_handlers
from marketplace.api.routers.auth import router as auth_router
from marketplace.api.routers.booking import router as booking_router
from marketplace.api.routers.health import router as health_router
from marketplace.api.routers.service import router as service_router
from marketplace.common.logging import configure_logging

LOGGER = logging.getLogger("api.requests")

API_HTTP_REQUESTS_TOTAL = Counter(
    "api_http_requests_total",
    "Total number of HTTP requests processed by the API.",
    ["method", "path", "status_code"],
)
API_HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "api_http_request_duration_seconds",
    "API request duration in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
API_HTTP_INFLIGHT_REQUESTS = Gauge(
    "api_http_inflight_requests",
    "Number of API requests currently being processed.",
    ["method"],
)


def _route_label(request: Request) -> str:
    # templated path keeps label cardinality bounded (ids stay out of metrics)
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template or "unmatched"


def create_app(
    config: ApiConfig | None = None,
    db_client: DatabaseClient | None = None,
) -> FastAPI:
    """Create configured FastAPI application instance."""

    config = config or get_api_config()
    configure_logging(config.log_level)
    db = db_client or DatabaseClient(database_url=config.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if config.auto_create_schema:
            db.create_schema()
        app.state.db_connected_at_startup = db.can_connect()
        LOGGER.info(
            "api started environment=%s db_connected=%s",
            config.environment,
            app.state.db_connected_at_startup,
        )
        try:
            yield
        finally:
            db.dispose()

    app = FastAPI(
        title=config.api_name,
        description=(
            "Versioned API for a service-booking marketplace: accounts, a filterable service catalog, "
            "and role-scoped bookings. Sessions are carried in a signed cookie."
        ),
        version=config.app_version,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Service liveness, readiness, and version metadata."},
            {"name": "auth", "description": "Signup, login, logout, and the caller's profile."},
            {"name": "service", "description": "Service catalog listing and provider-owned writes."},
            {"name": "booking", "description": "Bookings scoped to the requester or the provider."},
        ],
    )
    app.state.config = config
    app.state.db = db

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        method_label = request.method
        started = time.perf_counter()
        status_code = 500
        API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label).inc()
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            duration_ms = (time.perf_counter() - started) * 1000.0

            response.headers["x-request-id"] = request_id
            response.headers["x-response-time-ms"] = f"{duration_ms:.2f}"

            if config.enable_request_logging:
                LOGGER.info(
                    "request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
                    request_id,
                    request.method,
                    request.url.path,
                    status_code,
                    duration_ms,
                )
            return response
        finally:
            path_label = _route_label(request)
            duration_s = time.perf_counter() - started
            API_HTTP_REQUESTS_TOTAL.labels(
                method=method_label,
                path=path_label,
                status_code=str(status_code),
            ).inc()
            API_HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method_label,
                path=path_label,
            ).observe(duration_s)
            API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label).dec()

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router, prefix=config.api_version_path)
    app.include_router(service_router, prefix=config.api_version_path)
    app.include_router(booking_router, prefix=config.api_version_path)

    return app
