"""
Vehicle inventory service.

Implements vehicle CRUD with the list price recomputed by the pricing
engine on every save, duplication, reservation (including virtual stock
reservations priced on the chosen configuration) and inventory filters.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from dealerhub.core.logging import get_logger, log_performance
from dealerhub.repositories.registry import RepositoryRegistry
from dealerhub.schemas.vehicles import (
    PriceQuoteRequest,
    PriceQuoteResponse,
    Vehicle,
    VehicleCreate,
    VehicleReserveRequest,
    VehicleUpdate,
    VirtualConfig,
)
from dealerhub.services.catalog.service import CatalogService
from dealerhub.services.pricing.pricing_engine import PricingEngine, VehicleSelection
from dealerhub.services.vehicles.enums import VehicleStatus

logger = get_logger(__name__)

CONFIGURATION_FIELDS = ("trim", "fuel_type", "exterior_color", "transmission")

NULLABLE_FIELDS = frozenset(
    {
        "year",
        "image_url",
        "custom_image_url",
        "previous_chassis",
        "original_stock",
        "estimated_arrival_days",
    }
)

RESERVATION_RESET: dict[str, Any] = {
    "reserved_by": None,
    "reserved_accessories": [],
    "reservation_destination": None,
    "reservation_timestamp": None,
    "virtual_config": None,
}


class VehicleServiceError(Exception):
    """Base exception for vehicle service errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


class VehicleValidationError(VehicleServiceError):
    """Exception raised when vehicle validation fails."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message, code="VEHICLE_VALIDATION_ERROR", **context)


class VehicleReservationError(VehicleServiceError):
    """Exception raised when a vehicle cannot be reserved or released."""

    def __init__(self, message: str, vehicle_id: str, status: str, **context: Any):
        super().__init__(
            message,
            code="VEHICLE_RESERVATION_ERROR",
            vehicle_id=vehicle_id,
            status=status,
            **context,
        )


class VehicleService:
    """
    Business logic service for vehicle inventory operations.

    Every write goes through ``_priced`` so that the stored price always
    reflects the catalog at the time of the last save.
    """

    def __init__(
        self,
        repositories: RepositoryRegistry,
        engine: Optional[PricingEngine] = None,
    ):
        self.repositories = repositories
        self.engine = engine or PricingEngine()
        self.catalog = CatalogService(repositories)

    def _is_virtual(self, location: Optional[str]) -> bool:
        return self.engine.is_virtual_stock(location)

    def _validate_configuration(self, values: dict[str, Any]) -> None:
        """
        Check that a physical vehicle is fully configured.

        Raises:
            VehicleValidationError: If a configuration field is missing
        """
        if self._is_virtual(values.get("location")):
            return

        missing = [name for name in (*CONFIGURATION_FIELDS, "telaio") if not values.get(name)]
        if missing:
            raise VehicleValidationError(
                "All configuration fields and the chassis number are required "
                "for vehicles outside virtual stock",
                missing=missing,
            )

    async def _priced(self, values: dict[str, Any]) -> dict[str, Any]:
        """Apply virtual stock rules and recompute the list price."""
        if self._is_virtual(values.get("location")):
            for name in CONFIGURATION_FIELDS:
                values[name] = ""
            values["telaio"] = ""
            values["accessories"] = []

        catalog = await self.catalog.load_snapshot()
        selection = VehicleSelection(
            model=values["model"],
            trim=values.get("trim", ""),
            fuel_type=values.get("fuel_type", ""),
            exterior_color=values.get("exterior_color", ""),
            transmission=values.get("transmission", ""),
            accessories=values.get("accessories", []),
            location=values.get("location"),
        )
        breakdown = self.engine.calculate_vehicle_price(catalog, selection)
        if breakdown is None:
            logger.warning(
                "Vehicle saved with pending price",
                model=selection.model,
                trim=selection.trim,
            )
            values["price"] = Decimal("0")
        else:
            values["price"] = breakdown.total
        return values

    async def list_vehicles(
        self,
        status: Optional[VehicleStatus] = None,
        model: Optional[str] = None,
        location: Optional[str] = None,
    ) -> list[Vehicle]:
        filters: dict[str, Any] = {}
        if status is not None:
            filters["status"] = status
        if model:
            filters["model"] = model
        if location:
            filters["location"] = location

        if not filters:
            return await self.repositories.vehicles.get_all()
        return await self.repositories.vehicles.find_by(**filters)

    async def get_vehicle(self, vehicle_id: str) -> Vehicle:
        return await self.repositories.vehicles.get_by_id(vehicle_id)

    async def create_vehicle(self, data: VehicleCreate) -> Vehicle:
        """
        Create a vehicle priced from the current catalog.

        Raises:
            VehicleValidationError: If a physical vehicle is not fully configured
        """
        values = data.model_dump()
        self._validate_configuration(values)

        with log_performance(logger, "vehicle_create", model=data.model):
            vehicle = await self.repositories.vehicles.create(await self._priced(values))

        logger.info(
            "Vehicle created",
            vehicle_id=vehicle.id,
            model=vehicle.model,
            location=vehicle.location,
            price=str(vehicle.price),
        )
        return vehicle

    async def update_vehicle(self, vehicle_id: str, data: VehicleUpdate) -> Vehicle:
        """
        Merge changes into a vehicle and recompute its price.

        Raises:
            RecordNotFoundError: If the vehicle does not exist
            VehicleValidationError: If the merged vehicle is not fully configured
        """
        current = await self.repositories.vehicles.get_by_id(vehicle_id)
        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }

        merged = current.model_dump()
        merged.update(changes)
        self._validate_configuration(merged)
        merged = await self._priced(merged)

        for name in (*CONFIGURATION_FIELDS, "telaio", "accessories", "price"):
            changes[name] = merged[name]

        vehicle = await self.repositories.vehicles.update(vehicle_id, changes)
        logger.info(
            "Vehicle updated",
            vehicle_id=vehicle_id,
            fields=sorted(data.model_dump(exclude_unset=True)),
            price=str(vehicle.price),
        )
        return vehicle

    async def delete_vehicle(self, vehicle_id: str) -> None:
        await self.repositories.vehicles.delete(vehicle_id)
        logger.info("Vehicle deleted", vehicle_id=vehicle_id)

    async def duplicate_vehicle(self, vehicle_id: str) -> Vehicle:
        """Copy a vehicle under a new id, dated today."""
        source = await self.repositories.vehicles.get_by_id(vehicle_id)
        values = source.model_dump(exclude={"id"})
        values["date_added"] = date.today()

        duplicate = await self.repositories.vehicles.create(await self._priced(values))
        logger.info("Vehicle duplicated", source_id=vehicle_id, vehicle_id=duplicate.id)
        return duplicate

    async def price_configuration(self, request: PriceQuoteRequest) -> PriceQuoteResponse:
        """Price a configuration without saving it."""
        catalog = await self.catalog.load_snapshot()
        selection = VehicleSelection(
            model=request.model,
            trim=request.trim,
            fuel_type=request.fuel_type,
            exterior_color=request.exterior_color,
            transmission=request.transmission,
            accessories=request.accessories,
            location=request.location,
        )
        breakdown = self.engine.calculate_vehicle_price(catalog, selection)
        return PriceQuoteResponse(
            pending=breakdown is None,
            price=breakdown.total if breakdown else Decimal("0"),
            breakdown=breakdown,
        )

    async def _price_virtual_config(self, vehicle: Vehicle, config: VirtualConfig) -> VirtualConfig:
        """
        Price the configuration chosen for a virtual stock vehicle.

        Raises:
            VehicleValidationError: If the configuration does not resolve
        """
        catalog = await self.catalog.load_snapshot()
        selection = VehicleSelection(
            model=vehicle.model,
            trim=config.trim,
            fuel_type=config.fuel_type,
            exterior_color=config.exterior_color,
            transmission=config.transmission,
            accessories=config.accessories,
        )
        breakdown = self.engine.calculate_vehicle_price(catalog, selection)
        if breakdown is None:
            raise VehicleValidationError(
                "Virtual configuration does not match the catalog",
                vehicle_id=vehicle.id,
                model=vehicle.model,
            )
        return config.model_copy(update={"price": breakdown.total})

    async def reserve_vehicle(self, vehicle_id: str, request: VehicleReserveRequest) -> Vehicle:
        """
        Reserve an available vehicle for a dealer.

        Raises:
            RecordNotFoundError: If the vehicle does not exist
            VehicleReservationError: If the vehicle is not available
            VehicleValidationError: If a virtual configuration is invalid
        """
        vehicle = await self.repositories.vehicles.get_by_id(vehicle_id)
        if vehicle.status != VehicleStatus.AVAILABLE:
            raise VehicleReservationError(
                "Vehicle is not available for reservation",
                vehicle_id=vehicle_id,
                status=vehicle.status.value,
            )

        changes: dict[str, Any] = {
            "status": VehicleStatus.RESERVED,
            "reserved_by": request.reserved_by,
            "reserved_accessories": request.reserved_accessories,
            "reservation_destination": request.reservation_destination,
            "reservation_timestamp": datetime.now(timezone.utc),
        }
        if request.virtual_config is not None:
            if not self._is_virtual(vehicle.location):
                raise VehicleValidationError(
                    "Only virtual stock vehicles accept a configuration on reservation",
                    vehicle_id=vehicle_id,
                    location=vehicle.location,
                )
            config = await self._price_virtual_config(vehicle, request.virtual_config)
            changes["virtual_config"] = config.model_dump()

        reserved = await self.repositories.vehicles.update(vehicle_id, changes)
        logger.info(
            "Vehicle reserved",
            vehicle_id=vehicle_id,
            reserved_by=request.reserved_by,
            virtual=request.virtual_config is not None,
        )
        return reserved

    async def cancel_reservation(self, vehicle_id: str) -> Vehicle:
        """
        Release a reserved vehicle back to available stock.

        Raises:
            VehicleReservationError: If the vehicle is not reserved
        """
        vehicle = await self.repositories.vehicles.get_by_id(vehicle_id)
        if vehicle.status != VehicleStatus.RESERVED:
            raise VehicleReservationError(
                "Vehicle is not reserved",
                vehicle_id=vehicle_id,
                status=vehicle.status.value,
            )

        released = await self.repositories.vehicles.update(
            vehicle_id, {"status": VehicleStatus.AVAILABLE, **RESERVATION_RESET}
        )
        logger.info("Vehicle reservation cancelled", vehicle_id=vehicle_id)
        return released
