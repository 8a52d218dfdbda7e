"""
Catalog configuration service.

CRUD for the six catalog tables plus the compatibility queries used when
configuring a vehicle: which trims, fuel types, colors and transmissions fit
a model, and which accessories fit a model and trim.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import BaseModel

from dealerhub.core.logging import get_logger
from dealerhub.repositories.base import Repository
from dealerhub.repositories.registry import RepositoryRegistry
from dealerhub.schemas.catalog import Accessory, CatalogSnapshot
from dealerhub.services.catalog.compatibility import fits_model, fits_model_and_trim

logger = get_logger(__name__)

VAT_DIVISOR = Decimal("1.22")

CATALOG_TABLES = ("models", "trims", "fuel_types", "colors", "transmissions", "accessories")


class CatalogServiceError(Exception):
    """Base exception for catalog service errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


class UnknownCatalogTableError(CatalogServiceError):
    def __init__(self, table: str):
        super().__init__(
            f"Unknown catalog table: {table}",
            code="CATALOG_TABLE_UNKNOWN",
            table=table,
            allowed=list(CATALOG_TABLES),
        )


class DuplicateCatalogEntryError(CatalogServiceError):
    def __init__(self, table: str, name: str):
        super().__init__(
            f"A {table} entry named '{name}' already exists",
            code="CATALOG_ENTRY_DUPLICATE",
            table=table,
            name=name,
        )


def price_without_vat(price_with_vat: Decimal) -> Decimal:
    """Net accessory price, assuming the standard 22% VAT, rounded to units."""
    return (Decimal(price_with_vat) / VAT_DIVISOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class CatalogService:
    """Catalog CRUD and compatibility lookups."""

    def __init__(self, repositories: RepositoryRegistry):
        self.repositories = repositories

    def _table(self, table: str) -> Repository:
        if table not in CATALOG_TABLES:
            raise UnknownCatalogTableError(table)
        return getattr(self.repositories, table)

    async def load_snapshot(self) -> CatalogSnapshot:
        """Load every catalog table for pricing."""
        return CatalogSnapshot(
            **{table: await self._table(table).get_all() for table in CATALOG_TABLES}
        )

    async def list_entries(self, table: str) -> list:
        return await self._table(table).get_all()

    async def get_entry(self, table: str, entry_id: str):
        return await self._table(table).get_by_id(entry_id)

    async def create_entry(self, table: str, data: BaseModel):
        repository = self._table(table)
        values = data.model_dump()
        await self._ensure_unique_name(table, values["name"])

        if table == "accessories" and not values.get("price_without_vat"):
            values["price_without_vat"] = price_without_vat(values["price_with_vat"])

        entry = await repository.create(values)
        logger.info("Catalog entry created", table=table, entry_id=entry.id, name=entry.name)
        return entry

    async def update_entry(self, table: str, entry_id: str, data: BaseModel):
        repository = self._table(table)
        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key == "image_url"
        }

        if "name" in changes:
            await self._ensure_unique_name(table, changes["name"], exclude_id=entry_id)
        if table == "accessories" and "price_with_vat" in changes and "price_without_vat" not in changes:
            changes["price_without_vat"] = price_without_vat(changes["price_with_vat"])

        entry = await repository.update(entry_id, changes)
        logger.info("Catalog entry updated", table=table, entry_id=entry_id, fields=sorted(changes))
        return entry

    async def delete_entry(self, table: str, entry_id: str) -> None:
        await self._table(table).delete(entry_id)
        logger.info("Catalog entry deleted", table=table, entry_id=entry_id)

    async def _ensure_unique_name(
        self, table: str, name: str, exclude_id: Optional[str] = None
    ) -> None:
        # colors may share a name across paint types
        if table == "colors":
            return
        for entry in await self._table(table).get_all():
            if entry.name == name and entry.id != exclude_id:
                raise DuplicateCatalogEntryError(table, name)

    async def compatible_with_model(self, table: str, model_id: str) -> list:
        """Trims, fuel types, colors or transmissions that fit ``model_id``."""
        if table in ("models", "accessories"):
            raise UnknownCatalogTableError(table)
        return [entry for entry in await self._table(table).get_all() if fits_model(entry, model_id)]

    async def compatible_accessories(self, model_id: str, trim_id: str) -> list[Accessory]:
        """Accessories that fit both the model and the trim."""
        return [
            accessory
            for accessory in await self.repositories.accessories.get_all()
            if fits_model_and_trim(accessory, model_id, trim_id)
        ]

