# This file holds the closed vocabularies of the marketplace: roles, booking states, categories, weekdays.
# It exists so validation, the query translator, the ORM layer, and the access policy share one source of truth.
# The Identity value object is what a verified session token resolves to.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

ROLES: Final[tuple[str, ...]] = ("user", "provider", "admin")
SELF_SIGNUP_ROLES: Final[tuple[str, ...]] = ("user", "provider")
SERVICE_MANAGER_ROLES: Final[frozenset[str]] = frozenset({"provider", "admin"})

BOOKING_STATUSES: Final[tuple[str, ...]] = ("pending", "confirmed", "cancelled", "completed")
DEFAULT_BOOKING_STATUS: Final[str] = "pending"

SERVICE_CATEGORIES: Final[tuple[str, ...]] = (
    "home",
    "health",
    "education",
    "beauty",
    "tech",
    "events",
    "automotive",
    "sports",
    "food",
    "travel",
    "fitness",
    "pets",
    "music",
    "art",
    "fashion",
    "photography",
    "wellness",
    "business",
    "finance",
    "real estate",
    "construction",
    "cleaning",
    "gardening",
    "transportation",
    "security",
    "other",
)

WEEKDAYS: Final[tuple[str, ...]] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TITLE_MAX_LENGTH: Final[int] = 100
DESCRIPTION_MAX_LENGTH: Final[int] = 500
PASSWORD_MIN_LENGTH: Final[int] = 6
NAME_MAX_LENGTH: Final[int] = 120
BOOKING_TIME_MAX_LENGTH: Final[int] = 20
URL_MAX_LENGTH: Final[int] = 2048

# range of the 32-bit INTEGER columns
INTEGER_MAX: Final[int] = 2**31 - 1
# keeps `(page - 1) * limit` well inside a signed 64-bit OFFSET
PAGE_MAX: Final[int] = 2**31 - 1

RATING_MIN: Final[float] = 1.0
RATING_MAX: Final[float] = 5.0

_RECORD_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def is_record_id(value: object) -> bool:
    """Return True for identifiers in the store's 32-hex format."""

    return isinstance(value, str) and bool(_RECORD_ID_RE.match(value))


@dataclass(frozen=True)
class Identity:
    """Caller identity extracted from a verified session token."""

    user_id: str
    role: str
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
