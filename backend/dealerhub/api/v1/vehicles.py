"""
Vehicle stock API endpoints.

CRUD for stock vehicles, duplication, configuration pricing and the
reservation flow. Prices are always recomputed from the catalog on save.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from dealerhub.api.deps import VehicleServiceDep
from dealerhub.core.logging import get_logger
from dealerhub.schemas.common import ListResponse
from dealerhub.schemas.vehicles import (
    PriceQuoteRequest,
    PriceQuoteResponse,
    Vehicle,
    VehicleCreate,
    VehicleReserveRequest,
    VehicleUpdate,
)
from dealerhub.services.vehicles.enums import VehicleStatus
from dealerhub.services.vehicles.service import (
    VehicleReservationError,
    VehicleServiceError,
    VehicleValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


def _vehicle_http_error(error: VehicleServiceError) -> HTTPException:
    logger.warning("Vehicle request rejected", error=str(error), code=error.code, **error.context)
    if isinstance(error, VehicleReservationError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, VehicleValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error)
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get(
    "",
    response_model=ListResponse[Vehicle],
    summary="List stock vehicles",
    description="Newest first, optionally filtered by status, model or location",
)
async def list_vehicles(
    service: VehicleServiceDep,
    vehicle_status: Annotated[VehicleStatus | None, Query(alias="status")] = None,
    model: Annotated[str | None, Query(max_length=100)] = None,
    location: Annotated[str | None, Query(max_length=100)] = None,
) -> ListResponse[Vehicle]:
    items = await service.list_vehicles(status=vehicle_status, model=model, location=location)
    return ListResponse[Vehicle](items=items, total=len(items))


@router.post(
    "/price",
    response_model=PriceQuoteResponse,
    summary="Price a configuration",
    description="Compute the price of a configuration without saving a vehicle",
)
async def price_configuration(
    request: PriceQuoteRequest, service: VehicleServiceDep
) -> PriceQuoteResponse:
    return await service.price_configuration(request)


@router.get("/{vehicle_id}", response_model=Vehicle, summary="Get vehicle")
async def get_vehicle(vehicle_id: str, service: VehicleServiceDep) -> Vehicle:
    return await service.get_vehicle(vehicle_id)


@router.post(
    "",
    response_model=Vehicle,
    status_code=status.HTTP_201_CREATED,
    summary="Create vehicle",
)
async def create_vehicle(request: VehicleCreate, service: VehicleServiceDep) -> Vehicle:
    try:
        return await service.create_vehicle(request)
    except VehicleServiceError as e:
        raise _vehicle_http_error(e) from e


@router.patch("/{vehicle_id}", response_model=Vehicle, summary="Update vehicle")
async def update_vehicle(
    vehicle_id: str, request: VehicleUpdate, service: VehicleServiceDep
) -> Vehicle:
    try:
        return await service.update_vehicle(vehicle_id, request)
    except VehicleServiceError as e:
        raise _vehicle_http_error(e) from e


@router.delete(
    "/{vehicle_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete vehicle",
)
async def delete_vehicle(vehicle_id: str, service: VehicleServiceDep) -> None:
    await service.delete_vehicle(vehicle_id)


@router.post(
    "/{vehicle_id}/duplicate",
    response_model=Vehicle,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate vehicle",
)
async def duplicate_vehicle(vehicle_id: str, service: VehicleServiceDep) -> Vehicle:
    return await service.duplicate_vehicle(vehicle_id)


@router.post("/{vehicle_id}/reserve", response_model=Vehicle, summary="Reserve vehicle")
async def reserve_vehicle(
    vehicle_id: str, request: VehicleReserveRequest, service: VehicleServiceDep
) -> Vehicle:
    try:
        return await service.reserve_vehicle(vehicle_id, request)
    except VehicleServiceError as e:
        raise _vehicle_http_error(e) from e


@router.post(
    "/{vehicle_id}/cancel-reservation",
    response_model=Vehicle,
    summary="Cancel a reservation",
)
async def cancel_reservation(vehicle_id: str, service: VehicleServiceDep) -> Vehicle:
    try:
        return await service.cancel_reservation(vehicle_id)
    except VehicleServiceError as e:
        raise _vehicle_http_error(e) from e
