# This file defines booking rows with their populated service, requester, and provider references.

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime

from marketplace.api.schemas.common import EnvelopeFields, ResourceModel, UserSummaryV1


class BookedServiceV1(ResourceModel):
    id: str
    title: str
    description: str
    price: float


class BookingRowV1(ResourceModel):
    id: str
    service: BookedServiceV1 | None = None
    service_id: str
    user: UserSummaryV1 | None = None
    user_id: str
    provider: UserSummaryV1 | None = None
    provider_id: str
    status: str
    date: date_type
    time: str
    total_price: float
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BookingResponseV1(EnvelopeFields):
    data: BookingRowV1


class BookingListResponseV1(EnvelopeFields):
    count: int
    data: list[BookingRowV1]
