# This file implements the service catalog: listing with filters, lookup, and provider-owned writes.
# It exists so routers can stay transport-focused while query compilation and row shaping live in one layer.
# Listing takes a ListQuery from the query translator; writes go through the access policy first.
# Rows are shaped as dictionaries honouring the optional projection, with the provider populated.

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select

from marketplace.api.access_policy import authorize
from marketplace.api.api_config import ApiConfig
from marketplace.api.db_access import DatabaseClient
from marketplace.api.db_models import ServiceRecord, UserRecord
from marketplace.api.domain import Identity
from marketplace.api.error_handlers import NotFound
from marketplace.api.query_translator import (
    SERVICE_QUERY_FIELDS,
    ListQuery,
    Projection,
    compile_conditions,
    compile_order_by,
)
from marketplace.api.validation import ServiceInput, require_record_id, validate_service

LOGGER = logging.getLogger("catalog")

SERVICE_NOT_FOUND_MESSAGE = "Service not found"


def user_summary(record: UserRecord | None, fallback_id: str) -> dict[str, Any] | str:
    if record is None:
        return fallback_id
    return {"id": record.id, "name": record.name, "email": record.email}


def service_row(record: ServiceRecord, projection: Projection | None = None) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": record.id,
        "title": record.title,
        "description": record.description,
        "category": record.category,
        "price": record.price,
        "duration": record.duration,
        "availability": {
            "days": list(record.available_days or []),
            "start_time": record.start_time,
            "end_time": record.end_time,
        },
        "provider": user_summary(record.provider, record.provider_id),
        "image": record.image,
        "rating": record.rating,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }
    if projection is None:
        return row
    public_names = {"created_at": "createdAt", "updated_at": "updatedAt"}
    return {key: value for key, value in row.items() if projection.includes(public_names.get(key, key))}


def _apply_input(record: ServiceRecord, service_input: ServiceInput) -> None:
    record.title = service_input.title
    record.description = service_input.description
    record.category = service_input.category
    record.price = service_input.price
    record.duration = service_input.duration
    record.available_days = list(service_input.availability.days)
    record.start_time = service_input.availability.start_time
    record.end_time = service_input.availability.end_time
    record.image = service_input.image
    record.rating = service_input.rating


class CatalogService:
    """Data retrieval and writes for the service catalog routes."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db

    def list_services(self, query: ListQuery) -> list[dict[str, Any]]:
        statement = (
            select(ServiceRecord)
            .where(*compile_conditions(query.filter, fields=SERVICE_QUERY_FIELDS))
            .order_by(*compile_order_by(query.sort, fields=SERVICE_QUERY_FIELDS))
            .offset(query.skip)
            .limit(query.limit)
        )
        with self.db.session() as session:
            records = session.scalars(statement).all()
            return [service_row(record, query.projection) for record in records]

    def get_service(self, service_id: str) -> dict[str, Any]:
        require_record_id(service_id, resource="service")
        with self.db.session() as session:
            record = session.get(ServiceRecord, service_id)
            if record is None:
                raise NotFound(SERVICE_NOT_FOUND_MESSAGE)
            return service_row(record)

    def create_service(self, identity: Identity, payload: dict[str, Any]) -> dict[str, Any]:
        authorize(identity, "service", "create")
        service_input = validate_service(payload)

        with self.db.session() as session:
            record = ServiceRecord(provider_id=identity.user_id)
            _apply_input(record, service_input)
            session.add(record)
            session.flush()
            session.refresh(record)
            row = service_row(record)

        LOGGER.info("service created service_id=%s provider_id=%s", row["id"], identity.user_id)
        return row

    def update_service(
        self, identity: Identity, service_id: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        authorize(identity, "service", "manage")
        require_record_id(service_id, resource="service")
        service_input = validate_service(payload)

        with self.db.session() as session:
            record = session.get(ServiceRecord, service_id)
            if record is None:
                raise NotFound(SERVICE_NOT_FOUND_MESSAGE)
            authorize(identity, "service", "update", record)
            # the owning provider stays the same even when an admin edits
            _apply_input(record, service_input)
            session.flush()
            session.refresh(record)
            row = service_row(record)

        LOGGER.info("service updated service_id=%s by user_id=%s", service_id, identity.user_id)
        return row

    def delete_service(self, identity: Identity, service_id: str) -> None:
        authorize(identity, "service", "manage")
        require_record_id(service_id, resource="service")

        with self.db.session() as session:
            record = session.get(ServiceRecord, service_id)
            if record is None:
                raise NotFound(SERVICE_NOT_FOUND_MESSAGE)
            authorize(identity, "service", "delete", record)
            session.delete(record)

        LOGGER.info("service deleted service_id=%s by user_id=%s", service_id, identity.user_id)
