# This file declares the ORM tables for users, services, and bookings.
# References between records are plain id columns with view-only relationships, so deleting a user
# or a service never cascades and a booking keeps pointing at whatever it was created against.
# Primary keys are opaque 32-hex strings generated by the application.

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, Column, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

from marketplace.api.domain import DEFAULT_BOOKING_STATUS

Base = declarative_base()


def new_record_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class UserRecord(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_record_id)
    name = Column(String(120), nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    image_url = Column(String(2048), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)


class ServiceRecord(Base):
    __tablename__ = "services"

    id = Column(String(32), primary_key=True, default=new_record_id)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    category = Column(String(40), nullable=False, index=True)
    price = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)

    # availability
    available_days = Column(JSON, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    provider_id = Column(String(32), nullable=False, index=True)
    image = Column(String(2048), nullable=True)
    rating = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    provider = relationship(
        "UserRecord",
        primaryjoin="foreign(ServiceRecord.provider_id) == UserRecord.id",
        viewonly=True,
        lazy="selectin",
    )


class BookingRecord(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True, default=new_record_id)
    service_id = Column(String(32), nullable=False, index=True)
    user_id = Column(String(32), nullable=False, index=True)
    provider_id = Column(String(32), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=DEFAULT_BOOKING_STATUS)
    date = Column(Date, nullable=False)
    time = Column(String(20), nullable=False)
    total_price = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    service = relationship(
        "ServiceRecord",
        primaryjoin="foreign(BookingRecord.service_id) == ServiceRecord.id",
        viewonly=True,
        lazy="selectin",
    )
    user = relationship(
        "UserRecord",
        primaryjoin="foreign(BookingRecord.user_id) == UserRecord.id",
        viewonly=True,
        lazy="selectin",
    )
    provider = relationship(
        "UserRecord",
        primaryjoin="foreign(BookingRecord.provider_id) == UserRecord.id",
        viewonly=True,
        lazy="selectin",
    )
