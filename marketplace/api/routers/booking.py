# This file defines the booking endpoints under the versioned API path.
# Every route requires a session; listing is scoped to the caller's role by the booking service.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request

from marketplace.api.dependencies import ConfigDep, IdentityDep, get_booking_service
from marketplace.api.response_envelope import build_list_envelope, build_object_envelope
from marketplace.api.schemas.booking_schemas import BookingListResponseV1, BookingResponseV1
from marketplace.api.schemas.common import MessageResponseV1
from marketplace.api.services.booking_service import BookingService

router = APIRouter(prefix="/booking", tags=["booking"])
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
JsonBody = Annotated[dict[str, Any], Body()]


@router.get("/get-bookings", response_model=BookingListResponseV1)
def get_bookings(
    request: Request,
    identity: IdentityDep,
    service: BookingServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    rows = service.list_bookings(identity)
    return build_list_envelope(config=config, request=request, data=rows)


@router.post("/create-booking", status_code=201, response_model=BookingResponseV1)
def create_booking(
    request: Request,
    payload: JsonBody,
    identity: IdentityDep,
    service: BookingServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    row = service.create_booking(identity, payload)
    return build_object_envelope(
        config=config, request=request, data=row, message="Booking created successfully"
    )


@router.get("/get-booking/{booking_id}", response_model=BookingResponseV1)
def get_booking(
    request: Request,
    booking_id: str,
    identity: IdentityDep,
    service: BookingServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    row = service.get_booking(identity, booking_id)
    return build_object_envelope(config=config, request=request, data=row)


@router.put("/update-booking/{booking_id}", response_model=BookingResponseV1)
def update_booking(
    request: Request,
    booking_id: str,
    payload: JsonBody,
    identity: IdentityDep,
    service: BookingServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    row = service.update_booking(identity, booking_id, payload)
    return build_object_envelope(
        config=config, request=request, data=row, message="Booking updated successfully"
    )


@router.delete("/delete-booking/{booking_id}", response_model=MessageResponseV1)
def delete_booking(
    request: Request,
    booking_id: str,
    identity: IdentityDep,
    service: BookingServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    service.delete_booking(identity, booking_id)
    return build_object_envelope(
        config=config, request=request, message="Booking deleted successfully"
    )
