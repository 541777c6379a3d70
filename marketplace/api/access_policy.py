# This file is the authorization policy for every resource handler.
# Rules live in one table keyed by (resource, action); each rule is a predicate over the caller
# identity and the stored record, and `authorize` is the only place that evaluates them.
# Booking listings are scoped by role rather than checked per record, via `booking_list_scope`.

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal

from marketplace.api.domain import SERVICE_MANAGER_ROLES, Identity
from marketplace.api.error_handlers import Forbidden

LOGGER = logging.getLogger("api.access")

Resource = Literal["service", "booking"]
Action = Literal["create", "manage", "read", "update", "update_status", "delete"]
Rule = Callable[[Identity, Any], bool]


def _manages_services(identity: Identity, _: Any) -> bool:
    return identity.role in SERVICE_MANAGER_ROLES


def _owns_service_or_admin(identity: Identity, service: Any) -> bool:
    if not _manages_services(identity, service):
        return False
    return identity.is_admin or service.provider_id == identity.user_id


def _booking_party(identity: Identity, booking: Any) -> bool:
    return identity.user_id in (booking.user_id, booking.provider_id)


def _booking_party_or_admin(identity: Identity, booking: Any) -> bool:
    return identity.is_admin or _booking_party(identity, booking)


def _booking_provider_or_admin(identity: Identity, booking: Any) -> bool:
    return identity.is_admin or booking.provider_id == identity.user_id


def _booking_requester_or_admin(identity: Identity, booking: Any) -> bool:
    # providers cannot delete bookings made against their services
    return identity.is_admin or booking.user_id == identity.user_id


POLICY: dict[tuple[Resource, Action], tuple[Rule, str]] = {
    ("service", "create"): (_manages_services, "Access denied"),
    ("service", "manage"): (_manages_services, "Access denied"),
    ("service", "update"): (_owns_service_or_admin, "Not authorized to update this service"),
    ("service", "delete"): (_owns_service_or_admin, "Not authorized to delete this service"),
    ("booking", "read"): (_booking_party, "Unauthorized access"),
    ("booking", "update"): (_booking_party_or_admin, "Unauthorized access"),
    ("booking", "update_status"): (_booking_provider_or_admin, "Unauthorized access"),
    ("booking", "delete"): (_booking_requester_or_admin, "Unauthorized access"),
}


def is_allowed(identity: Identity, resource: Resource, action: Action, record: Any = None) -> bool:
    entry = POLICY.get((resource, action))
    if entry is None:
        return False
    rule, _ = entry
    return rule(identity, record)


def authorize(identity: Identity, resource: Resource, action: Action, record: Any = None) -> None:
    """Raise Forbidden unless the policy table allows the action."""

    if is_allowed(identity, resource, action, record):
        return
    _, message = POLICY.get((resource, action), (None, "Access denied"))
    LOGGER.info(
        "access denied user_id=%s role=%s resource=%s action=%s",
        identity.user_id,
        identity.role,
        resource,
        action,
    )
    raise Forbidden(message)


def booking_list_scope(identity: Identity) -> dict[str, str]:
    """Filter restricting a booking listing to what the caller may see."""

    if identity.role == "user":
        return {"user": identity.user_id}
    if identity.role == "provider":
        return {"provider": identity.user_id}
    return {}
