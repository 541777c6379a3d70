# This file provides dependency factories for FastAPI routes.
# The config and store handle are built by the application factory and read from `app.state`,
# so tests can hand the factory their own instances instead of overriding globals.
# `get_current_identity` is the session gate shared by every protected route.

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from marketplace.api.api_config import ApiConfig
from marketplace.api.db_access import DatabaseClient
from marketplace.api.domain import Identity
from marketplace.api.error_handlers import Unauthorized
from marketplace.api.services.auth_service import AuthService
from marketplace.api.services.booking_service import BookingService
from marketplace.api.services.catalog_service import CatalogService
from marketplace.api.session_tokens import verify_session_token


def get_config(request: Request) -> ApiConfig:
    return request.app.state.config


def get_database_client(request: Request) -> DatabaseClient:
    return request.app.state.db


ConfigDep = Annotated[ApiConfig, Depends(get_config)]
DBDep = Annotated[DatabaseClient, Depends(get_database_client)]


def get_auth_service(config: ConfigDep, db: DBDep) -> AuthService:
    return AuthService(config=config, db=db)


def get_catalog_service(config: ConfigDep, db: DBDep) -> CatalogService:
    return CatalogService(config=config, db=db)


def get_booking_service(config: ConfigDep, db: DBDep) -> BookingService:
    return BookingService(config=config, db=db)


def get_current_identity(request: Request, config: ConfigDep) -> Identity:
    """Resolve the caller from the session cookie or raise a 401."""

    token = request.cookies.get(config.cookie_name)
    if not token:
        raise Unauthorized("User unauthorized")
    identity = verify_session_token(config=config, token=token)
    request.state.user_id = identity.user_id
    return identity


IdentityDep = Annotated[Identity, Depends(get_current_identity)]
