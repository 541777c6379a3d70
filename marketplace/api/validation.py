# This file validates JSON request bodies for the auth, service, and booking handlers.
# Checks run in a fixed order and stop at the first problem, raising a 400 with a message naming that field.
# Validated payloads come back as small frozen dataclasses so services never touch raw dictionaries.

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from email_validator import EmailNotValidError, validate_email

from marketplace.api.domain import (
    BOOKING_STATUSES,
    BOOKING_TIME_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    INTEGER_MAX,
    NAME_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    RATING_MAX,
    RATING_MIN,
    SELF_SIGNUP_ROLES,
    SERVICE_CATEGORIES,
    TITLE_MAX_LENGTH,
    URL_MAX_LENGTH,
    WEEKDAYS,
    is_record_id,
)
from marketplace.api.error_handlers import ValidationFailed

_CLOCK_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

BOOKING_UPDATABLE_FIELDS = frozenset({"status", "date", "time", "notes"})


@dataclass(frozen=True)
class SignupInput:
    name: str
    email: str
    password: str
    role: str = "user"
    image_url: str | None = None


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class Availability:
    days: tuple[str, ...]
    start_time: str
    end_time: str


@dataclass(frozen=True)
class ServiceInput:
    title: str
    description: str
    category: str
    price: float
    duration: int
    availability: Availability
    image: str | None = None
    rating: float | None = None


@dataclass(frozen=True)
class BookingInput:
    service_id: str
    date: date
    time: str
    notes: str | None = None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _optional_text(payload: Mapping[str, Any], key: str, message: str) -> str | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationFailed(message)
    return value.strip()


def _optional_url(payload: Mapping[str, Any], key: str, label: str) -> str | None:
    value = _optional_text(payload, key, f"{label} must be a string")
    if value is not None and len(value) > URL_MAX_LENGTH:
        raise ValidationFailed(f"{label} cannot be more than {URL_MAX_LENGTH} characters")
    return value


def validate_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed("Name must be a string.")
    name = value.strip()
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationFailed(f"Name cannot be more than {NAME_MAX_LENGTH} characters.")
    return name


def validate_password(value: Any) -> str:
    if not isinstance(value, str) or len(value) < PASSWORD_MIN_LENGTH:
        raise ValidationFailed(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    return value


def _booking_time(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed("Time is required")
    time = value.strip()
    if len(time) > BOOKING_TIME_MAX_LENGTH:
        raise ValidationFailed(f"Time cannot be more than {BOOKING_TIME_MAX_LENGTH} characters")
    return time


def normalize_email(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationFailed("Invalid email address.")
    try:
        result = validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationFailed("Invalid email address.") from exc
    return result.normalized.lower()


def parse_calendar_date(value: Any) -> date:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed("Invalid date format")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise ValidationFailed("Invalid date format") from exc


def validate_signup(payload: Mapping[str, Any]) -> SignupInput:
    name = payload.get("name")
    email = payload.get("email")
    password = payload.get("password")
    if _blank(name) or _blank(email) or password in (None, ""):
        raise ValidationFailed("Name, email and password are all required.")
    valid_name = validate_name(name)
    normalized_email = normalize_email(email)
    valid_password = validate_password(password)

    role = payload.get("role") or "user"
    if role not in SELF_SIGNUP_ROLES:
        raise ValidationFailed(f"Role must be one of: {', '.join(SELF_SIGNUP_ROLES)}.")

    image_url = _optional_url(payload, "imageUrl", "Image URL")
    return SignupInput(
        name=valid_name,
        email=normalized_email,
        password=valid_password,
        role=str(role),
        image_url=image_url,
    )


def validate_login(payload: Mapping[str, Any]) -> LoginInput:
    email = payload.get("email")
    password = payload.get("password")
    if _blank(email) or password in (None, ""):
        raise ValidationFailed("Email and password are required.")
    normalized_email = normalize_email(email)
    if not isinstance(password, str):
        raise ValidationFailed("Invalid email or password.")
    return LoginInput(email=normalized_email, password=password)


def _required_text(payload: Mapping[str, Any], key: str, message: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or value.strip() == "":
        raise ValidationFailed(message)
    return value.strip()


def _validate_availability(value: Any) -> Availability:
    if not isinstance(value, Mapping):
        raise ValidationFailed("Availability is required")

    days = value.get("days")
    if not isinstance(days, list) or not days:
        raise ValidationFailed("Days are required")
    for day in days:
        if day not in WEEKDAYS:
            raise ValidationFailed(f"Invalid day: {day}")

    start_time = _required_text(value, "startTime", "Start time is required")
    end_time = _required_text(value, "endTime", "End time is required")
    if not _CLOCK_TIME_RE.match(start_time):
        raise ValidationFailed("Start time must use HH:MM format")
    if not _CLOCK_TIME_RE.match(end_time):
        raise ValidationFailed("End time must use HH:MM format")
    # zero-padded HH:MM compares correctly as text
    if start_time >= end_time:
        raise ValidationFailed("End time must be after start time")

    ordered_days = tuple(day for day in WEEKDAYS if day in days)
    return Availability(days=ordered_days, start_time=start_time, end_time=end_time)


def validate_service(payload: Mapping[str, Any]) -> ServiceInput:
    title = _required_text(payload, "title", "Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationFailed(f"Title cannot be more than {TITLE_MAX_LENGTH} characters")

    description = _required_text(payload, "description", "Description is required")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationFailed(
            f"Description cannot be more than {DESCRIPTION_MAX_LENGTH} characters"
        )

    category = _required_text(payload, "category", "Category is required")
    if category not in SERVICE_CATEGORIES:
        raise ValidationFailed(f"Invalid category: {category}")

    price = payload.get("price")
    if not _is_number(price) or price < 0:
        raise ValidationFailed("Price must be a positive number")

    duration = payload.get("duration")
    if not _is_number(duration) or duration < 1:
        raise ValidationFailed("Duration must be a positive number")
    if duration > INTEGER_MAX:
        raise ValidationFailed(f"Duration cannot be more than {INTEGER_MAX} minutes")
    if int(duration) != duration:
        raise ValidationFailed("Duration must be a whole number of minutes")

    availability = _validate_availability(payload.get("availability"))

    image = _optional_url(payload, "image", "Image")

    rating = payload.get("rating")
    if rating is not None:
        if not _is_number(rating) or not RATING_MIN <= rating <= RATING_MAX:
            raise ValidationFailed("Rating must be between 1 and 5")

    return ServiceInput(
        title=title,
        description=description,
        category=category,
        price=float(price),
        duration=int(duration),
        availability=availability,
        image=image,
        rating=float(rating) if rating is not None else None,
    )


def validate_booking(payload: Mapping[str, Any]) -> BookingInput:
    service_id = payload.get("serviceId")
    if _blank(service_id):
        raise ValidationFailed("Service is required")
    if not is_record_id(service_id):
        raise ValidationFailed("Invalid service ID")

    if _blank(payload.get("date")):
        raise ValidationFailed("Date is required")
    booking_date = parse_calendar_date(payload.get("date"))

    time = payload.get("time")
    if _blank(time):
        raise ValidationFailed("Time is required")
    if not isinstance(time, str):
        raise ValidationFailed("Time must be a string")
    booking_time = _booking_time(time)

    notes = _optional_text(payload, "notes", "Notes must be a string")
    return BookingInput(service_id=service_id, date=booking_date, time=booking_time, notes=notes)


def validate_booking_changes(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return the column changes requested by a booking update."""

    if not payload:
        raise ValidationFailed("No updatable fields provided")
    for key in payload:
        if key not in BOOKING_UPDATABLE_FIELDS:
            raise ValidationFailed(f"Field '{key}' cannot be updated")

    changes: dict[str, Any] = {}
    if "status" in payload:
        status = payload["status"]
        if status not in BOOKING_STATUSES:
            raise ValidationFailed(f"Invalid booking status: {status}")
        changes["status"] = status
    if "date" in payload:
        changes["date"] = parse_calendar_date(payload["date"])
    if "time" in payload:
        changes["time"] = _booking_time(payload["time"])
    if "notes" in payload:
        notes = payload["notes"]
        if notes is not None and not isinstance(notes, str):
            raise ValidationFailed("Notes must be a string")
        changes["notes"] = notes
    return changes


def require_record_id(value: str, *, resource: str) -> str:
    if not is_record_id(value):
        raise ValidationFailed(f"Invalid {resource} ID")
    return value
