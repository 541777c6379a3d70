# This file defines the service catalog endpoints under the versioned API path.
# Listing is public and accepts the filter/select/sort/page grammar parsed by the query translator.
# Writes require a session; role and ownership checks happen in the catalog service.
# The list route serializes with `exclude_unset` so fields dropped by `select` stay out of the rows.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request

from marketplace.api.dependencies import ConfigDep, IdentityDep, get_catalog_service
from marketplace.api.query_translator import build_page_links, translate_service_query
from marketplace.api.response_envelope import build_list_envelope, build_object_envelope
from marketplace.api.schemas.common import MessageResponseV1
from marketplace.api.schemas.service_schemas import ServiceListResponseV1, ServiceResponseV1
from marketplace.api.services.catalog_service import CatalogService

router = APIRouter(prefix="/service", tags=["service"])
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
JsonBody = Annotated[dict[str, Any], Body()]


@router.get(
    "/get-services",
    response_model=ServiceListResponseV1,
    response_model_exclude_unset=True,
)
def get_services(
    request: Request,
    service: CatalogServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    query = translate_service_query(
        request.query_params.multi_items(),
        default_sort=config.default_service_sort,
        default_limit=config.default_page_size,
        max_limit=config.max_page_size,
    )
    rows = service.list_services(query)
    return build_list_envelope(
        config=config,
        request=request,
        data=rows,
        pagination=build_page_links(
            page=query.pagination.page,
            limit=query.pagination.limit,
            returned=len(rows),
        ),
    )


@router.post("/create-service", status_code=201, response_model=ServiceResponseV1)
def create_service(
    request: Request,
    payload: JsonBody,
    identity: IdentityDep,
    service: CatalogServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    row = service.create_service(identity, payload)
    return build_object_envelope(
        config=config, request=request, data=row, message="Service created successfully"
    )


@router.get("/get-service/{service_id}", response_model=ServiceResponseV1)
def get_service(
    request: Request,
    service_id: str,
    service: CatalogServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(config=config, request=request, data=service.get_service(service_id))


@router.put("/update-service/{service_id}", response_model=ServiceResponseV1)
def update_service(
    request: Request,
    service_id: str,
    payload: JsonBody,
    identity: IdentityDep,
    service: CatalogServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    row = service.update_service(identity, service_id, payload)
    return build_object_envelope(
        config=config, request=request, data=row, message="Service updated successfully"
    )


@router.delete("/delete-service/{service_id}", response_model=MessageResponseV1)
def delete_service(
    request: Request,
    service_id: str,
    identity: IdentityDep,
    service: CatalogServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    service.delete_service(identity, service_id)
    return build_object_envelope(
        config=config, request=request, message="Service deleted successfully"
    )
