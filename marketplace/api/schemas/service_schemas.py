# This file defines service rows plus the single-object and list envelopes.
# Every row field except `id` is optional because `select` projections may drop any of them.

from __future__ import annotations

from datetime import datetime

from marketplace.api.schemas.common import EnvelopeFields, PageLinks, ResourceModel, UserSummaryV1


class AvailabilityV1(ResourceModel):
    days: list[str]
    start_time: str
    end_time: str


class ServiceRowV1(ResourceModel):
    id: str
    title: str | None = None
    description: str | None = None
    category: str | None = None
    price: float | None = None
    duration: int | None = None
    availability: AvailabilityV1 | None = None
    provider: UserSummaryV1 | str | None = None
    image: str | None = None
    rating: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ServiceResponseV1(EnvelopeFields):
    data: ServiceRowV1


class ServiceListResponseV1(EnvelopeFields):
    count: int
    pagination: PageLinks
    data: list[ServiceRowV1]
