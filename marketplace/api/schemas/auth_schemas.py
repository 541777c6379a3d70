# This file defines the account profile returned by signup, login, and getUser.
# The stored password hash has no field here, so it can never be serialized.

from __future__ import annotations

from datetime import datetime

from marketplace.api.schemas.common import EnvelopeFields, ResourceModel


class UserProfileV1(ResourceModel):
    id: str
    name: str
    email: str
    role: str
    image_url: str | None = None
    created_at: datetime | None = None


class UserProfileResponseV1(EnvelopeFields):
    user: UserProfileV1
