# This file defines the signup, login, logout, and profile endpoints.
# Signup and login deliver the session token as a cookie and return the profile in the envelope.
# Logout only clears the cookie; tokens are stateless and stay valid until they expire.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, Response

from marketplace.api.dependencies import ConfigDep, IdentityDep, get_auth_service
from marketplace.api.response_envelope import build_object_envelope
from marketplace.api.schemas.auth_schemas import UserProfileResponseV1
from marketplace.api.schemas.common import MessageResponseV1
from marketplace.api.services.auth_service import AuthService
from marketplace.api.session_tokens import clear_session_cookie, set_session_cookie

router = APIRouter(prefix="/auth", tags=["auth"])
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
JsonBody = Annotated[dict[str, Any], Body()]


@router.post("/signup", status_code=201, response_model=UserProfileResponseV1)
def signup(
    request: Request,
    response: Response,
    payload: JsonBody,
    service: AuthServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    profile, token = service.signup(payload)
    set_session_cookie(response, token=token, config=config)
    return build_object_envelope(
        config=config,
        request=request,
        data=profile,
        message="User created successfully",
        key="user",
    )


@router.post("/login", response_model=UserProfileResponseV1)
def login(
    request: Request,
    response: Response,
    payload: JsonBody,
    service: AuthServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    profile, token = service.login(payload)
    set_session_cookie(response, token=token, config=config)
    return build_object_envelope(
        config=config,
        request=request,
        data=profile,
        message="Logged in successfully",
        key="user",
    )


@router.post("/logout", response_model=MessageResponseV1)
def logout(request: Request, response: Response, config: ConfigDep) -> dict[str, object]:
    clear_session_cookie(response, config=config)
    return build_object_envelope(config=config, request=request, message="Logged out successfully")


@router.get("/getUser", response_model=UserProfileResponseV1)
def get_user(
    request: Request,
    identity: IdentityDep,
    service: AuthServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    profile = service.get_profile(identity)
    return build_object_envelope(config=config, request=request, data=profile, key="user")
