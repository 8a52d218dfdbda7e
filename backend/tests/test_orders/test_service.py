"""
Test suite for OrderService.

Tests cover order placement with its dealer and vehicle snapshot, checklist
edits, ODL generation, delivery with the vehicle moved to dealer stock,
rollback when the order write fails, and cancellation.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from dealerhub.repositories.base import RepositoryError
from dealerhub.schemas.orders import OrderCreate, OrderDetailsUpdate, OrderUpdate
from dealerhub.schemas.vehicles import VehicleCreate, VehicleReserveRequest
from dealerhub.services.orders.enums import FundingType, OrderStatus
from dealerhub.services.orders.service import (
    OrderDeliveryError,
    OrderService,
    OrderValidationError,
)
from dealerhub.services.vehicles.enums import VehicleStatus
from dealerhub.services.vehicles.service import VehicleService


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def service(registry) -> OrderService:
    return OrderService(registry)


@pytest.fixture
async def vehicle(registry, catalog, aurora):
    vehicles = VehicleService(registry)
    created = await vehicles.create_vehicle(VehicleCreate(**aurora()))
    return await vehicles.reserve_vehicle(
        created.id, VehicleReserveRequest(reserved_by="dealer-milano")
    )


@pytest.fixture
async def order(service, vehicle, dealer):
    return await service.create_order(
        OrderCreate(vehicle_id=vehicle.id, dealer_id=dealer.id, customer_name="Mario Rossi")
    )


# ============================================================================
# Order Placement
# ============================================================================


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_snapshot_of_dealer_and_vehicle(self, order, registry, vehicle):
        assert order.status == OrderStatus.PROCESSING
        assert order.progressive_number == 1
        assert order.price == Decimal("23500")
        assert order.dealer_name == "Autocirelli Milano Srl"
        assert order.model_name == "Aurora"
        assert order.plafond_dealer == Decimal("50000")
        assert not order.details.odl_generated

        stored_vehicle = await registry.vehicles.get_by_id(vehicle.id)
        assert stored_vehicle.status == VehicleStatus.ORDERED

    @pytest.mark.asyncio
    async def test_snapshot_survives_dealer_rename(self, service, order, registry, dealer):
        await registry.dealers.update(dealer.id, {"company_name": "Nuovo Nome Srl"})

        assert (await service.get_order(order.id)).dealer_name == "Autocirelli Milano Srl"

    @pytest.mark.asyncio
    async def test_progressive_numbers_increase(self, service, order, vehicle, dealer):
        second = await service.create_order(
            OrderCreate(
                vehicle_id=vehicle.id,
                dealer_id=dealer.id,
                customer_name="Anna Verdi",
                price=Decimal("21000"),
            )
        )

        assert second.progressive_number == 2
        assert second.price == Decimal("21000")

    @pytest.mark.asyncio
    async def test_default_credit_limit(self, service, registry, vehicle):
        dealer = await registry.dealers.create(
            {
                "company_name": "Autocirelli Torino Srl",
                "email": "torino@autocirelli.it",
                "password": "not-a-real-hash",
            }
        )

        order = await service.create_order(
            OrderCreate(vehicle_id=vehicle.id, dealer_id=dealer.id, customer_name="Luca Neri")
        )

        assert order.plafond_dealer == Decimal("300000")

    @pytest.mark.asyncio
    async def test_failed_vehicle_update_discards_order(
        self, service, registry, vehicle, dealer
    ):
        with patch.object(
            registry.vehicles,
            "update",
            AsyncMock(side_effect=RepositoryError("vehicles table unavailable")),
        ):
            with pytest.raises(RepositoryError):
                await service.create_order(
                    OrderCreate(
                        vehicle_id=vehicle.id, dealer_id=dealer.id, customer_name="Mario Rossi"
                    )
                )

        assert await registry.orders.get_all() == []


# ============================================================================
# Edits
# ============================================================================


class TestOrderEdits:
    @pytest.mark.asyncio
    async def test_update_price(self, service, order):
        updated = await service.update_order(order.id, OrderUpdate(price=Decimal("22000")))

        assert updated.price == Decimal("22000")
        assert updated.customer_name == "Mario Rossi"

    @pytest.mark.asyncio
    async def test_update_details_merges_checklist(self, service, order):
        await service.update_details(order.id, OrderDetailsUpdate(is_paid=True))
        updated = await service.update_details(
            order.id,
            OrderDetailsUpdate(funding_type=FundingType.CAPTIVE, invoice_number="FT-12"),
        )

        assert updated.details.is_paid
        assert updated.details.funding_type == FundingType.CAPTIVE
        assert updated.details.invoice_number == "FT-12"

    @pytest.mark.asyncio
    async def test_cancelled_order_cannot_be_edited(self, service, order):
        await service.cancel_order(order.id)

        with pytest.raises(OrderValidationError):
            await service.update_order(order.id, OrderUpdate(price=Decimal("1")))
        with pytest.raises(OrderValidationError):
            await service.generate_odl(order.id)


# ============================================================================
# Delivery and Cancellation
# ============================================================================


class TestDelivery:
    @pytest.mark.asyncio
    async def test_delivery_requires_odl(self, service, order, registry, vehicle):
        with pytest.raises(OrderDeliveryError) as exc_info:
            await service.mark_as_delivered(order.id)

        assert str(exc_info.value) == "ODL not generated"
        assert exc_info.value.context["order_id"] == order.id
        assert exc_info.value.current_state == OrderStatus.PROCESSING
        assert (await service.get_order(order.id)).status == OrderStatus.PROCESSING
        stored_vehicle = await registry.vehicles.get_by_id(vehicle.id)
        assert stored_vehicle.status == VehicleStatus.ORDERED

    @pytest.mark.asyncio
    async def test_delivery_moves_vehicle_to_dealer_stock(
        self, service, order, registry, vehicle
    ):
        await service.generate_odl(order.id)

        delivered = await service.mark_as_delivered(order.id)

        assert delivered.status == OrderStatus.DELIVERED
        assert delivered.delivery_date is not None
        stored_vehicle = await registry.vehicles.get_by_id(vehicle.id)
        assert stored_vehicle.status == VehicleStatus.DELIVERED
        assert stored_vehicle.location == "Stock Dealer"

    @pytest.mark.asyncio
    async def test_failed_order_write_restores_vehicle(
        self, service, order, registry, vehicle
    ):
        await service.generate_odl(order.id)

        with patch.object(
            registry.orders,
            "update",
            AsyncMock(side_effect=RepositoryError("orders table unavailable")),
        ):
            with pytest.raises(RepositoryError):
                await service.mark_as_delivered(order.id)

        stored_vehicle = await registry.vehicles.get_by_id(vehicle.id)
        assert stored_vehicle.status == VehicleStatus.ORDERED
        assert stored_vehicle.location == "Stock Italia"
        assert (await service.get_order(order.id)).status == OrderStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_delivered_order_cannot_be_delivered_again(self, service, order):
        await service.generate_odl(order.id)
        await service.mark_as_delivered(order.id)

        with pytest.raises(OrderDeliveryError) as exc_info:
            await service.mark_as_delivered(order.id)

        assert exc_info.value.context["current_status"] == "delivered"

    @pytest.mark.asyncio
    async def test_cancel(self, service, order):
        cancelled = await service.cancel_order(order.id)

        assert cancelled.status == OrderStatus.CANCELLED

        with pytest.raises(OrderDeliveryError):
            await service.cancel_order(order.id)

    @pytest.mark.asyncio
    async def test_status_counts(self, service, order):
        await service.cancel_order(order.id)

        counts = await service.status_counts(dealer_id="dealer-milano")

        assert counts.cancelled == 1
        assert counts.processing == 0
        assert counts.total == 1
