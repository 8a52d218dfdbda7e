"""
Catalog configuration API endpoints.

Every catalog table (models, trims, fuel types, colors, transmissions,
accessories) gets the same CRUD routes under ``/catalog/{table}``, plus the
compatibility lookups used by the vehicle configurator.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from dealerhub.api.deps import CatalogServiceDep
from dealerhub.core.logging import get_logger
from dealerhub.schemas.catalog import (
    Accessory,
    AccessoryCreate,
    AccessoryUpdate,
    CatalogSnapshot,
    ExteriorColor,
    ExteriorColorCreate,
    ExteriorColorUpdate,
    FuelType,
    FuelTypeCreate,
    FuelTypeUpdate,
    Transmission,
    TransmissionCreate,
    TransmissionUpdate,
    VehicleModel,
    VehicleModelCreate,
    VehicleModelUpdate,
    VehicleTrim,
    VehicleTrimCreate,
    VehicleTrimUpdate,
)
from dealerhub.schemas.common import ListResponse
from dealerhub.services.catalog.service import (
    CatalogServiceError,
    DuplicateCatalogEntryError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])

# table -> (record, create request, update request)
CATALOG_SCHEMAS: dict[str, tuple[Any, Any, Any]] = {
    "models": (VehicleModel, VehicleModelCreate, VehicleModelUpdate),
    "trims": (VehicleTrim, VehicleTrimCreate, VehicleTrimUpdate),
    "fuel_types": (FuelType, FuelTypeCreate, FuelTypeUpdate),
    "colors": (ExteriorColor, ExteriorColorCreate, ExteriorColorUpdate),
    "transmissions": (Transmission, TransmissionCreate, TransmissionUpdate),
    "accessories": (Accessory, AccessoryCreate, AccessoryUpdate),
}

# URL segment for each table
TABLE_PATHS = {
    "models": "models",
    "trims": "trims",
    "fuel_types": "fuel-types",
    "colors": "colors",
    "transmissions": "transmissions",
    "accessories": "accessories",
}


def _catalog_http_error(error: CatalogServiceError) -> HTTPException:
    logger.warning("Catalog request rejected", error=str(error), code=error.code, **error.context)
    if isinstance(error, DuplicateCatalogEntryError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get(
    "",
    response_model=CatalogSnapshot,
    summary="Full catalog",
    description="All catalog tables in one response, as used for pricing",
)
async def get_catalog(service: CatalogServiceDep) -> CatalogSnapshot:
    return await service.load_snapshot()


@router.get(
    "/models/{model_id}/trims/{trim_id}/accessories",
    response_model=ListResponse[Accessory],
    summary="Accessories compatible with a model and trim",
)
async def list_compatible_accessories(
    model_id: str, trim_id: str, service: CatalogServiceDep
) -> ListResponse[Accessory]:
    items = await service.compatible_accessories(model_id, trim_id)
    return ListResponse[Accessory](items=items, total=len(items))


def _register_table_routes(table: str, record_cls: Any, create_cls: Any, update_cls: Any) -> None:
    path = f"/{TABLE_PATHS[table]}"
    label = table.replace("_", " ")

    async def list_entries(service: CatalogServiceDep) -> ListResponse[record_cls]:
        items = await service.list_entries(table)
        return ListResponse[record_cls](items=items, total=len(items))

    async def get_entry(entry_id: str, service: CatalogServiceDep) -> record_cls:
        return await service.get_entry(table, entry_id)

    async def create_entry(request: create_cls, service: CatalogServiceDep) -> record_cls:
        try:
            return await service.create_entry(table, request)
        except CatalogServiceError as e:
            raise _catalog_http_error(e) from e

    async def update_entry(
        entry_id: str, request: update_cls, service: CatalogServiceDep
    ) -> record_cls:
        try:
            return await service.update_entry(table, entry_id, request)
        except CatalogServiceError as e:
            raise _catalog_http_error(e) from e

    async def delete_entry(entry_id: str, service: CatalogServiceDep) -> None:
        await service.delete_entry(table, entry_id)

    router.add_api_route(
        path,
        list_entries,
        methods=["GET"],
        response_model=ListResponse[record_cls],
        summary=f"List {label}",
        name=f"list_{table}",
    )
    router.add_api_route(
        f"{path}/{{entry_id}}",
        get_entry,
        methods=["GET"],
        response_model=record_cls,
        summary=f"Get one of the {label}",
        name=f"get_{table}",
    )
    router.add_api_route(
        path,
        create_entry,
        methods=["POST"],
        response_model=record_cls,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create one of the {label}",
        name=f"create_{table}",
    )
    router.add_api_route(
        f"{path}/{{entry_id}}",
        update_entry,
        methods=["PATCH"],
        response_model=record_cls,
        summary=f"Update one of the {label}",
        name=f"update_{table}",
    )
    router.add_api_route(
        f"{path}/{{entry_id}}",
        delete_entry,
        methods=["DELETE"],
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete one of the {label}",
        name=f"delete_{table}",
    )

    if table not in ("models", "accessories"):

        async def list_for_model(model_id: str, service: CatalogServiceDep) -> ListResponse[record_cls]:
            items = await service.compatible_with_model(table, model_id)
            return ListResponse[record_cls](items=items, total=len(items))

        router.add_api_route(
            f"/models/{{model_id}}/{TABLE_PATHS[table]}",
            list_for_model,
            methods=["GET"],
            response_model=ListResponse[record_cls],
            summary=f"{label.capitalize()} compatible with a model",
            name=f"list_{table}_for_model",
        )


for _table, (_record_cls, _create_cls, _update_cls) in CATALOG_SCHEMAS.items():
    _register_table_routes(_table, _record_cls, _create_cls, _update_cls)
