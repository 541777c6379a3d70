# This file issues and verifies the signed session token carried in the `token` cookie.
# It exists so token lifetime, claims, and cookie flags are decided in one place for login, signup, and logout.
# Verification distinguishes expired, tampered, and structurally broken tokens so each maps to a 401.

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Response
from jose import ExpiredSignatureError, JWTError, jwt

from marketplace.api.api_config import ApiConfig
from marketplace.api.domain import ROLES, Identity
from marketplace.api.error_handlers import TokenExpired, TokenInvalid, TokenMalformed


def issue_session_token(
    *,
    config: ApiConfig,
    user_id: str,
    email: str,
    role: str,
    now: datetime | None = None,
) -> str:
    """Sign a session token for the given account."""

    issued_at = now or datetime.now(tz=UTC)
    claims: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=config.session_ttl_seconds),
    }
    return jwt.encode(claims, config.jwt_secret, algorithm=config.jwt_algorithm)


def verify_session_token(*, config: ApiConfig, token: str) -> Identity:
    """Decode a session token into the caller identity or raise an Unauthorized subtype."""

    try:
        claims = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except JWTError as exc:
        raise TokenInvalid() from exc

    user_id = claims.get("sub")
    role = claims.get("role")
    email = claims.get("email")
    if not isinstance(user_id, str) or not user_id:
        raise TokenMalformed()
    if role not in ROLES:
        raise TokenMalformed()
    return Identity(user_id=user_id, role=str(role), email=str(email or ""))


def set_session_cookie(response: Response, *, token: str, config: ApiConfig) -> None:
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        max_age=config.session_ttl_seconds,
        path="/",
        httponly=config.cookie_httponly,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )


def clear_session_cookie(response: Response, *, config: ApiConfig) -> None:
    response.delete_cookie(
        key=config.cookie_name,
        path="/",
        httponly=config.cookie_httponly,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )