# This file defines shared schema pieces reused by multiple API endpoints.
# It exists so envelope metadata, page links, populated references, and error payloads stay consistent.
# Resource models inherit ResourceModel, which serializes snake_case attributes as camelCase.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ResourceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageDescriptor(BaseModel):
    page: int
    limit: int


class PageLinks(BaseModel):
    next: PageDescriptor | None = None
    prev: PageDescriptor | None = None


class UserSummaryV1(ResourceModel):
    id: str
    name: str
    email: str


class EnvelopeFields(BaseModel):
    success: bool = True
    message: str | None = None
    api_version: str
    schema_version: str
    request_id: str
    generated_at: datetime


class MessageResponseV1(EnvelopeFields):
    pass


class ErrorResponse(BaseModel):
    success: bool = False
    error_code: str
    message: str
    details: Any | None = None
    request_id: str
    timestamp: datetime
