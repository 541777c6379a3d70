# This file implements booking creation, role-scoped listing, lookup, updates, and deletion.
# Price and provider are copied from the service when the booking is made and never re-synced.
# Every per-record decision goes through the access policy; listings use the caller's role scope.
# Overlapping bookings for the same service and slot are accepted as-is.

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select

from marketplace.api.access_policy import authorize, booking_list_scope
from marketplace.api.api_config import ApiConfig
from marketplace.api.db_access import DatabaseClient
from marketplace.api.db_models import BookingRecord, ServiceRecord, UserRecord
from marketplace.api.domain import DEFAULT_BOOKING_STATUS, Identity
from marketplace.api.error_handlers import NotFound
from marketplace.api.query_translator import BOOKING_SCOPE_FIELDS, compile_conditions
from marketplace.api.validation import require_record_id, validate_booking, validate_booking_changes

LOGGER = logging.getLogger("bookings")

BOOKING_NOT_FOUND_MESSAGE = "Booking not found"


def _party(record: UserRecord | None) -> dict[str, Any] | None:
    if record is None:
        return None
    return {"id": record.id, "name": record.name, "email": record.email}


def _booked_service(record: ServiceRecord | None) -> dict[str, Any] | None:
    if record is None:
        return None
    return {
        "id": record.id,
        "title": record.title,
        "description": record.description,
        "price": record.price,
    }


def booking_row(record: BookingRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "service": _booked_service(record.service),
        "service_id": record.service_id,
        "user": _party(record.user),
        "user_id": record.user_id,
        "provider": _party(record.provider),
        "provider_id": record.provider_id,
        "status": record.status,
        "date": record.date,
        "time": record.time,
        "total_price": record.total_price,
        "notes": record.notes,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


class BookingService:
    """Data retrieval and writes for the booking routes."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db

    def list_bookings(self, identity: Identity) -> list[dict[str, Any]]:
        scope = booking_list_scope(identity)
        statement = (
            select(BookingRecord)
            .where(*compile_conditions(scope, fields=BOOKING_SCOPE_FIELDS))
            .order_by(BookingRecord.created_at.desc(), BookingRecord.id.asc())
        )
        with self.db.session() as session:
            records = session.scalars(statement).all()
            return [booking_row(record) for record in records]

    def create_booking(self, identity: Identity, payload: dict[str, Any]) -> dict[str, Any]:
        booking_input = validate_booking(payload)

        with self.db.session() as session:
            service = session.get(ServiceRecord, booking_input.service_id)
            if service is None:
                raise NotFound("Service not found")

            record = BookingRecord(
                service_id=service.id,
                user_id=identity.user_id,
                provider_id=service.provider_id,
                status=DEFAULT_BOOKING_STATUS,
                date=booking_input.date,
                time=booking_input.time,
                total_price=service.price,
                notes=booking_input.notes or "",
            )
            session.add(record)
            session.flush()
            session.refresh(record)
            row = booking_row(record)

        LOGGER.info(
            "booking created booking_id=%s service_id=%s user_id=%s",
            row["id"],
            row["service_id"],
            identity.user_id,
        )
        return row

    def get_booking(self, identity: Identity, booking_id: str) -> dict[str, Any]:
        require_record_id(booking_id, resource="booking")
        with self.db.session() as session:
            record = session.get(BookingRecord, booking_id)
            if record is None:
                raise NotFound(BOOKING_NOT_FOUND_MESSAGE)
            authorize(identity, "booking", "read", record)
            return booking_row(record)

    def update_booking(
        self, identity: Identity, booking_id: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        require_record_id(booking_id, resource="booking")

        with self.db.session() as session:
            record = session.get(BookingRecord, booking_id)
            if record is None:
                raise NotFound(BOOKING_NOT_FOUND_MESSAGE)
            authorize(identity, "booking", "update", record)

            changes = validate_booking_changes(payload)
            if "status" in changes:
                authorize(identity, "booking", "update_status", record)

            for column, value in changes.items():
                setattr(record, column, value)
            session.flush()
            session.refresh(record)
            row = booking_row(record)

        LOGGER.info(
            "booking updated booking_id=%s fields=%s by user_id=%s",
            booking_id,
            ",".join(sorted(changes)),
            identity.user_id,
        )
        return row

    def delete_booking(self, identity: Identity, booking_id: str) -> None:
        require_record_id(booking_id, resource="booking")

        with self.db.session() as session:
            record = session.get(BookingRecord, booking_id)
            if record is None:
                raise NotFound(BOOKING_NOT_FOUND_MESSAGE)
            authorize(identity, "booking", "delete", record)
            session.delete(record)

        LOGGER.info("booking deleted booking_id=%s by user_id=%s", booking_id, identity.user_id)
