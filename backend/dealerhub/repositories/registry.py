"""
Repository wiring for both storage backends.

``RepositoryRegistry`` bundles one repository per entity. Services receive
the registry instead of individual repositories so that operations touching
several entities (delivering an order updates a vehicle too) work on the
same backend and, for the database, the same session.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.database.mappers import OrderRowMapper, RowMapper
from dealerhub.database.models import (
    AccessoryRow,
    DealerContractRow,
    DealerRow,
    DefectReportRow,
    ExteriorColorRow,
    FuelTypeRow,
    OrderRow,
    QuoteRow,
    TransmissionRow,
    VehicleModelRow,
    VehicleRow,
    VehicleTrimRow,
)
from dealerhub.repositories.base import Repository
from dealerhub.repositories.memory import InMemoryRepository, MemoryStore
from dealerhub.repositories.sql import SqlRepository
from dealerhub.schemas.catalog import (
    Accessory,
    ExteriorColor,
    FuelType,
    Transmission,
    VehicleModel,
    VehicleTrim,
)
from dealerhub.schemas.contracts import DealerContract
from dealerhub.schemas.dealers import Dealer
from dealerhub.schemas.defect_reports import DefectReport
from dealerhub.schemas.orders import Order
from dealerhub.schemas.quotes import Quote
from dealerhub.schemas.vehicles import Vehicle


@dataclass
class RepositoryRegistry:
    models: Repository[VehicleModel]
    trims: Repository[VehicleTrim]
    fuel_types: Repository[FuelType]
    colors: Repository[ExteriorColor]
    transmissions: Repository[Transmission]
    accessories: Repository[Accessory]
    vehicles: Repository[Vehicle]
    quotes: Repository[Quote]
    orders: Repository[Order]
    dealers: Repository[Dealer]
    contracts: Repository[DealerContract]
    defect_reports: Repository[DefectReport]


# attribute -> (row class, record class, JSON columns, entity label)
_ENTITIES: dict[str, tuple[Any, Any, tuple[str, ...], str]] = {
    "models": (VehicleModelRow, VehicleModel, (), "Model"),
    "trims": (VehicleTrimRow, VehicleTrim, ("compatible_models",), "Trim"),
    "fuel_types": (FuelTypeRow, FuelType, ("compatible_models",), "Fuel type"),
    "colors": (ExteriorColorRow, ExteriorColor, ("compatible_models",), "Color"),
    "transmissions": (TransmissionRow, Transmission, ("compatible_models",), "Transmission"),
    "accessories": (
        AccessoryRow,
        Accessory,
        ("compatible_models", "compatible_trims"),
        "Accessory",
    ),
    "vehicles": (
        VehicleRow,
        Vehicle,
        ("accessories", "reserved_accessories", "virtual_config"),
        "Vehicle",
    ),
    "quotes": (QuoteRow, Quote, ("accessories",), "Quote"),
    "orders": (OrderRow, Order, (), "Order"),
    "dealers": (DealerRow, Dealer, (), "Dealer"),
    "contracts": (DealerContractRow, DealerContract, ("contract_details",), "Contract"),
    "defect_reports": (DefectReportRow, DefectReport, ("photo_report_urls",), "Defect report"),
}


def build_memory_registry(store: MemoryStore) -> RepositoryRegistry:
    """Registry backed by the in-memory store, one table per entity."""
    return RepositoryRegistry(
        **{
            name: InMemoryRepository(store, row_cls.__tablename__, record_cls, entity)
            for name, (row_cls, record_cls, _, entity) in _ENTITIES.items()
        }
    )


def build_sql_registry(session: AsyncSession) -> RepositoryRegistry:
    """Registry backed by database tables, all sharing ``session``."""
    repositories = {}
    for name, (row_cls, record_cls, json_fields, entity) in _ENTITIES.items():
        mapper_cls = OrderRowMapper if row_cls is OrderRow else RowMapper
        mapper = mapper_cls(row_cls, record_cls, json_fields)
        repositories[name] = SqlRepository(session, mapper, entity)
    return RepositoryRegistry(**repositories)
