"""
Tests for the record store: the in-memory backend, the row mappers and the
SQL repository error handling.
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from dealerhub.database.mappers import OrderRowMapper, RowMapper
from dealerhub.database.models import DefectReportRow, OrderRow, VehicleRow
from dealerhub.repositories.base import RecordNotFoundError, RepositoryError
from dealerhub.repositories.memory import MemoryStore, get_memory_store
from dealerhub.repositories.registry import build_memory_registry
from dealerhub.repositories.seed import seed_memory_store
from dealerhub.repositories.sql import SqlRepository
from dealerhub.schemas.orders import Order, OrderDetails
from dealerhub.schemas.vehicles import Vehicle, VirtualConfig
from dealerhub.services.orders.enums import FundingType, OrderStatus
from dealerhub.services.vehicles.enums import VehicleStatus


# ============================================================================
# In-memory Backend
# ============================================================================


class TestInMemoryRepository:
    @pytest.mark.asyncio
    async def test_create_generates_id(self, registry):
        model = await registry.models.create({"name": "Aurora", "base_price": Decimal("20000")})

        assert model.id
        assert (await registry.models.get_by_id(model.id)).name == "Aurora"

    @pytest.mark.asyncio
    async def test_get_all_newest_first(self, registry):
        await registry.models.create({"id": "m1", "name": "Aurora", "base_price": 1})
        await registry.models.create({"id": "m2", "name": "Brezza", "base_price": 1})

        assert [m.id for m in await registry.models.get_all()] == ["m2", "m1"]

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, registry):
        trim = await registry.trims.create(
            {"name": "Premium", "base_price": 1, "compatible_models": ["m1"]}
        )

        trim.compatible_models.append("m2")

        assert (await registry.trims.get_by_id(trim.id)).compatible_models == ["m1"]

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, registry):
        model = await registry.models.create({"name": "Aurora", "base_price": 1})

        updated = await registry.models.update(model.id, {"base_price": Decimal("2")})

        assert updated.name == "Aurora"
        assert updated.base_price == Decimal("2")

    @pytest.mark.asyncio
    async def test_timestamps_set_when_the_record_has_them(self, registry):
        contract = await registry.contracts.create(
            {
                "dealer_id": "d1",
                "vehicle_id": "v1",
                "contract_date": datetime.now(timezone.utc),
            }
        )

        assert contract.created_at is not None
        assert contract.updated_at is not None

    @pytest.mark.asyncio
    async def test_find_by(self, registry):
        await registry.colors.create({"name": "Blu", "type": "metallizzato"})
        await registry.colors.create({"name": "Blu", "type": "pastello"})
        await registry.colors.create({"name": "Rosso"})

        assert len(await registry.colors.find_by(name="Blu")) == 2
        assert len(await registry.colors.find_by(name="Blu", type="pastello")) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["get", "update", "delete"])
    async def test_missing_record(self, registry, operation):
        await registry.models.create({"id": "m1", "name": "Aurora", "base_price": 1})

        with pytest.raises(RecordNotFoundError) as exc_info:
            if operation == "get":
                await registry.models.get_by_id("missing")
            elif operation == "update":
                await registry.models.update("missing", {"name": "X"})
            else:
                await registry.models.delete("missing")

        assert exc_info.value.entity == "Model"
        assert exc_info.value.record_id == "missing"
        assert [m.id for m in await registry.models.get_all()] == ["m1"]

    @pytest.mark.asyncio
    async def test_registry_shares_the_store(self):
        store = get_memory_store()
        first = build_memory_registry(store)
        second = build_memory_registry(store)

        await first.models.create({"id": "m1", "name": "Aurora", "base_price": 1})

        assert (await second.models.get_by_id("m1")).name == "Aurora"


class TestSeedData:
    @pytest.mark.asyncio
    async def test_seeded_vehicles_are_priced(self):
        store = MemoryStore()
        seed_memory_store(store)
        registry = build_memory_registry(store)

        vehicles = await registry.vehicles.get_all()
        physical = [v for v in vehicles if v.location != "Stock Virtuale"]

        assert vehicles
        assert all(v.price > 0 for v in physical)
        assert (await registry.quotes.get_by_id("quote-1")).status.value == "pending"
        assert (await registry.orders.get_by_id("order-1")).details.funding_type == (
            FundingType.FACTOR
        )


# ============================================================================
# Row Mappers
# ============================================================================


class TestRowMappers:
    def test_json_fields_and_enums(self):
        mapper = RowMapper(VehicleRow, Vehicle, ("accessories", "virtual_config"))

        values = mapper.to_values(
            {
                "model": "Aurora",
                "status": VehicleStatus.RESERVED,
                "accessories": ["Tappetini"],
                "virtual_config": VirtualConfig(
                    trim="Premium",
                    fuel_type="Benzina",
                    exterior_color="Blu",
                    transmission="Manuale",
                    price=Decimal("23500"),
                ),
                "unknown_field": "ignored",
            }
        )

        assert values["status"] == "reserved"
        assert values["virtual_config"]["price"] == "23500"
        assert "unknown_field" not in values

    def test_order_details_are_flattened(self):
        mapper = OrderRowMapper(OrderRow, Order)

        values = mapper.to_values(
            {
                "customer_name": "Mario Rossi",
                "status": OrderStatus.DELIVERED,
                "details": OrderDetails(
                    odl_generated=True, funding_type=FundingType.CAPTIVE
                ),
            }
        )

        assert "details" not in values
        assert values["odl_generated"] is True
        assert values["funding_type"] == "Captive"
        assert values["status"] == "delivered"

    def test_order_row_is_folded_into_details(self):
        mapper = OrderRowMapper(OrderRow, Order)
        row = OrderRow(
            id="o1",
            customer_name="Mario Rossi",
            status="processing",
            order_date=datetime.now(timezone.utc),
            progressive_number=3,
            price=Decimal("100"),
            is_licensable=True,
            has_proforma=False,
            is_paid=False,
            is_invoiced=False,
            has_conformity=False,
            transport_costs=Decimal("0"),
            restoration_costs=Decimal("0"),
            odl_generated=True,
        )

        order = mapper.to_record(row)

        assert order.details.odl_generated
        assert order.details.is_licensable
        assert order.status == OrderStatus.PROCESSING


# ============================================================================
# SQL Backend
# ============================================================================


class TestSqlRepository:
    @pytest.fixture
    def session(self) -> MagicMock:
        session = MagicMock()
        session.get = AsyncMock(return_value=None)
        session.execute = AsyncMock()
        session.flush = AsyncMock()
        session.refresh = AsyncMock()
        session.delete = AsyncMock()
        return session

    @pytest.fixture
    def repository(self, session) -> SqlRepository:
        return SqlRepository(session, OrderRowMapper(OrderRow, Order), "Order")

    @pytest.mark.asyncio
    async def test_missing_row(self, repository, session):
        with pytest.raises(RecordNotFoundError):
            await repository.get_by_id("missing")

        with pytest.raises(RecordNotFoundError):
            await repository.delete("missing")

        session.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_error_is_wrapped(self, repository, session):
        session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )

        with pytest.raises(RepositoryError) as exc_info:
            await repository.get_all()

        assert "database error" in str(exc_info.value)
        assert exc_info.value.context["entity"] == "Order"

    @pytest.mark.asyncio
    async def test_integrity_error_is_reported(self, repository, session):
        session.flush.side_effect = IntegrityError(
            "INSERT", {}, Exception("duplicate key value violates unique constraint")
        )

        with pytest.raises(RepositoryError) as exc_info:
            await repository.create(
                {
                    "customer_name": "Mario Rossi",
                    "order_date": datetime.now(timezone.utc),
                }
            )

        assert "data integrity violation" in str(exc_info.value)

    @pytest.mark.parametrize(
        "row_cls, column",
        [(OrderRow, "progressive_number"), (DefectReportRow, "case_number")],
    )
    def test_sequential_numbers_are_unique(self, row_cls, column):
        assert row_cls.__table__.c[column].unique is True
