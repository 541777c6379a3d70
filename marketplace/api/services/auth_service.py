# This file implements account creation, login, and profile lookup.
# It exists so routers only deal with cookies and envelopes while credential checks live in one layer.
# Passwords are hashed before storage and the stored hash is never part of any returned profile.
# Email uniqueness is checked up front and again through the unique index when the insert commits.

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from marketplace.api.api_config import ApiConfig
from marketplace.api.db_access import DatabaseClient
from marketplace.api.db_models import UserRecord
from marketplace.api.domain import ROLES, Identity
from marketplace.api.error_handlers import Conflict, NotFound, Unauthorized, ValidationFailed
from marketplace.api.passwords import hash_password, verify_password
from marketplace.api.session_tokens import issue_session_token
from marketplace.api.validation import validate_login, validate_signup

LOGGER = logging.getLogger("auth")

EMAIL_IN_USE_MESSAGE = "Email already in use."
BAD_CREDENTIALS_MESSAGE = "Invalid email or password."


def user_profile(record: UserRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "email": record.email,
        "role": record.role,
        "image_url": record.image_url,
        "created_at": record.created_at,
    }


class AuthService:
    """Credential storage and session issuance for the auth routes."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: str,
        image_url: str | None = None,
    ) -> dict[str, Any]:
        if role not in ROLES:
            raise ValidationFailed(f"Role must be one of: {', '.join(ROLES)}.")

        try:
            with self.db.session() as session:
                existing = session.scalar(select(UserRecord.id).where(UserRecord.email == email))
                if existing is not None:
                    raise Conflict(EMAIL_IN_USE_MESSAGE)

                record = UserRecord(
                    name=name,
                    email=email,
                    password=hash_password(password, rounds=self.config.password_hash_rounds),
                    role=role,
                    image_url=image_url,
                )
                session.add(record)
                session.flush()
                profile = user_profile(record)
        except IntegrityError as exc:
            raise Conflict(EMAIL_IN_USE_MESSAGE) from exc

        LOGGER.info("user created user_id=%s role=%s", profile["id"], role)
        return profile

    def signup(self, payload: dict[str, Any]) -> tuple[dict[str, Any], str]:
        signup = validate_signup(payload)
        profile = self.create_user(
            name=signup.name,
            email=signup.email,
            password=signup.password,
            role=signup.role,
            image_url=signup.image_url,
        )
        return profile, self._token_for(profile)

    def login(self, payload: dict[str, Any]) -> tuple[dict[str, Any], str]:
        credentials = validate_login(payload)
        with self.db.session() as session:
            record = session.scalar(
                select(UserRecord).where(UserRecord.email == credentials.email)
            )
            if record is None:
                raise Unauthorized(BAD_CREDENTIALS_MESSAGE)
            if not verify_password(
                credentials.password, record.password, rounds=self.config.password_hash_rounds
            ):
                LOGGER.info("login rejected user_id=%s", record.id)
                raise Unauthorized(BAD_CREDENTIALS_MESSAGE)
            profile = user_profile(record)

        LOGGER.info("login user_id=%s", profile["id"])
        return profile, self._token_for(profile)

    def get_profile(self, identity: Identity) -> dict[str, Any]:
        with self.db.session() as session:
            record = session.get(UserRecord, identity.user_id)
            if record is None:
                raise NotFound("User not found")
            return user_profile(record)

    def _token_for(self, profile: dict[str, Any]) -> str:
        return issue_session_token(
            config=self.config,
            user_id=profile["id"],
            email=profile["email"],
            role=profile["role"],
        )
