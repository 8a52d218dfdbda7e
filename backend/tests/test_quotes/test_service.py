"""
Test suite for the quote lifecycle service.

Covers pricing on create and edit, the explicit status transitions,
conversion into a dealer contract (including the rollback of the quote
status when the contract cannot be written), deletion and statistics.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from dealerhub.repositories.base import RecordNotFoundError, RepositoryError
from dealerhub.schemas.quotes import ContractorData, QuoteCreate, QuoteUpdate
from dealerhub.schemas.vehicles import VehicleCreate
from dealerhub.services.contracts.enums import ContractStatus
from dealerhub.services.quotes.enums import (
    QuoteStatus,
    get_allowed_quote_transitions,
    validate_quote_status_transition,
)
from dealerhub.services.quotes.service import (
    QuoteService,
    QuoteTransitionError,
    QuoteValidationError,
)
from dealerhub.services.vehicles.service import VehicleService


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def service(registry) -> QuoteService:
    return QuoteService(registry)


@pytest.fixture
async def vehicle(registry, catalog, aurora):
    return await VehicleService(registry).create_vehicle(VehicleCreate(**aurora()))


@pytest.fixture
def quote_data(vehicle, dealer):
    def build(**overrides) -> QuoteCreate:
        values = {
            "vehicle_id": vehicle.id,
            "dealer_id": dealer.id,
            "customer_name": "Giulia Bianchi",
            "customer_email": "Giulia.Bianchi@example.it",
            "discount": Decimal("1500"),
        }
        values.update(overrides)
        return QuoteCreate(**values)

    return build


@pytest.fixture
def contractor() -> ContractorData:
    return ContractorData(first_name="Giulia", last_name="Bianchi", city="Milano")


# ============================================================================
# Transition Table
# ============================================================================


class TestQuoteTransitions:
    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (QuoteStatus.PENDING, QuoteStatus.APPROVED, True),
            (QuoteStatus.PENDING, QuoteStatus.REJECTED, True),
            (QuoteStatus.PENDING, QuoteStatus.CONVERTED, True),
            (QuoteStatus.APPROVED, QuoteStatus.PENDING, True),
            (QuoteStatus.APPROVED, QuoteStatus.CONVERTED, True),
            (QuoteStatus.APPROVED, QuoteStatus.REJECTED, False),
            (QuoteStatus.REJECTED, QuoteStatus.PENDING, False),
            (QuoteStatus.CONVERTED, QuoteStatus.PENDING, False),
        ],
    )
    def test_transition_table(self, current, target, allowed):
        assert validate_quote_status_transition(current, target) is allowed

    def test_terminal_states_have_no_exits(self):
        assert get_allowed_quote_transitions(QuoteStatus.REJECTED) == set()
        assert get_allowed_quote_transitions(QuoteStatus.CONVERTED) == set()
        assert QuoteStatus.CONVERTED.is_terminal()
        assert not QuoteStatus.APPROVED.is_terminal()


# ============================================================================
# Create / Update
# ============================================================================


class TestQuotePricing:
    @pytest.mark.asyncio
    async def test_create_uses_vehicle_price_and_default_fee(self, service, quote_data):
        """23500 + 350 - 1500 = 22350."""
        quote = await service.create_quote(quote_data())

        assert quote.status == QuoteStatus.PENDING
        assert quote.price == Decimal("23500")
        assert quote.road_preparation_fee == Decimal("350")
        assert quote.final_price == Decimal("22350")
        assert quote.customer_email == "giulia.bianchi@example.it"

    @pytest.mark.asyncio
    async def test_accessories_already_fitted_are_not_charged(self, service, quote_data):
        quote = await service.create_quote(
            quote_data(accessories=["Tetto apribile", "Tappetini"])
        )

        assert quote.accessory_price == Decimal("150")
        assert quote.final_price == Decimal("22500")

    @pytest.mark.asyncio
    async def test_price_override(self, service, quote_data):
        quote = await service.create_quote(
            quote_data(price=Decimal("20000"), road_preparation_fee=Decimal("0"))
        )

        assert quote.final_price == Decimal("18500")

    @pytest.mark.asyncio
    async def test_trade_in_reduces_final_price(self, service, quote_data):
        quote = await service.create_quote(
            quote_data(
                has_trade_in=True,
                trade_in_brand="Fiat",
                trade_in_model="Panda",
                trade_in_value=Decimal("3000"),
                trade_in_handling_fee=Decimal("200"),
            )
        )

        assert quote.final_price == Decimal("19550")

    @pytest.mark.asyncio
    async def test_trade_in_details_dropped_without_trade_in(self, service, quote_data):
        quote = await service.create_quote(
            quote_data(trade_in_brand="Fiat", trade_in_value=Decimal("3000"))
        )

        assert quote.trade_in_brand is None
        assert quote.trade_in_value == Decimal("0")
        assert quote.final_price == Decimal("22350")

    @pytest.mark.asyncio
    async def test_unpriced_vehicle_requires_manual_entry(
        self, service, registry, quote_data, vehicle
    ):
        await registry.vehicles.update(vehicle.id, {"price": Decimal("0")})

        with pytest.raises(QuoteValidationError):
            await service.create_quote(quote_data())

        manual = await service.create_quote(quote_data(manual_entry=True))
        assert manual.final_price == Decimal("0")

    @pytest.mark.asyncio
    async def test_unknown_dealer(self, service, quote_data):
        with pytest.raises(RecordNotFoundError):
            await service.create_quote(quote_data(dealer_id="missing"))

    @pytest.mark.asyncio
    async def test_update_recomputes_final_price(self, service, quote_data):
        quote = await service.create_quote(quote_data())

        updated = await service.update_quote(
            quote.id, QuoteUpdate(discount=Decimal("500"), accessories=["Tappetini"])
        )

        assert updated.accessory_price == Decimal("150")
        assert updated.final_price == Decimal("23500")

    @pytest.mark.asyncio
    async def test_update_removing_trade_in_clears_it(self, service, quote_data):
        quote = await service.create_quote(
            quote_data(has_trade_in=True, trade_in_brand="Fiat", trade_in_value=Decimal("3000"))
        )

        updated = await service.update_quote(quote.id, QuoteUpdate(has_trade_in=False))

        assert updated.trade_in_brand is None
        assert updated.trade_in_value == Decimal("0")
        assert updated.final_price == Decimal("22350")

    @pytest.mark.asyncio
    async def test_update_ignores_trade_in_value_without_trade_in(self, service, quote_data):
        quote = await service.create_quote(quote_data())

        updated = await service.update_quote(
            quote.id, QuoteUpdate(trade_in_brand="Fiat", trade_in_value=Decimal("5000"))
        )

        assert updated.has_trade_in is False
        assert updated.trade_in_brand is None
        assert updated.trade_in_value == Decimal("0")
        assert updated.final_price == quote.final_price

    @pytest.mark.asyncio
    async def test_update_adding_trade_in_reduces_final_price(self, service, quote_data):
        quote = await service.create_quote(quote_data())

        updated = await service.update_quote(
            quote.id, QuoteUpdate(has_trade_in=True, trade_in_value=Decimal("5000"))
        )

        assert updated.trade_in_value == Decimal("5000")
        assert updated.final_price == Decimal("17350")

    @pytest.mark.asyncio
    async def test_closed_quote_cannot_be_edited(self, service, quote_data):
        quote = await service.create_quote(quote_data())
        await service.reject_quote(quote.id, "Cliente non interessato")

        with pytest.raises(QuoteValidationError):
            await service.update_quote(quote.id, QuoteUpdate(discount=Decimal("0")))


# ============================================================================
# Lifecycle
# ============================================================================


class TestQuoteLifecycle:
    @pytest.mark.asyncio
    async def test_approve_and_revert(self, service, quote_data):
        quote = await service.create_quote(quote_data())

        approved = await service.approve_quote(quote.id)
        assert approved.status == QuoteStatus.APPROVED

        reverted = await service.revert_to_pending(quote.id)
        assert reverted.status == QuoteStatus.PENDING

    @pytest.mark.asyncio
    async def test_reject_stores_reason(self, service, quote_data):
        quote = await service.create_quote(quote_data())

        rejected = await service.reject_quote(quote.id, "  Prezzo troppo alto ")

        assert rejected.status == QuoteStatus.REJECTED
        assert rejected.rejection_reason == "Prezzo troppo alto"

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, service, quote_data):
        quote = await service.create_quote(quote_data())

        with pytest.raises(QuoteValidationError):
            await service.reject_quote(quote.id, "   ")

    @pytest.mark.asyncio
    async def test_rejected_quote_cannot_be_approved(self, service, quote_data):
        quote = await service.create_quote(quote_data())
        await service.reject_quote(quote.id, "No")

        with pytest.raises(QuoteTransitionError) as exc_info:
            await service.approve_quote(quote.id)

        assert exc_info.value.current_state == QuoteStatus.REJECTED
        assert exc_info.value.target_state == QuoteStatus.APPROVED
        assert exc_info.value.context["allowed_transitions"] == []

    @pytest.mark.asyncio
    async def test_delete_requires_confirmation(self, service, quote_data):
        quote = await service.create_quote(quote_data())

        with pytest.raises(QuoteValidationError):
            await service.delete_quote(quote.id, confirm=False)
        assert (await service.get_quote(quote.id)).id == quote.id

        await service.delete_quote(quote.id, confirm=True)
        with pytest.raises(RecordNotFoundError):
            await service.get_quote(quote.id)

    @pytest.mark.asyncio
    async def test_status_counts(self, service, quote_data):
        first = await service.create_quote(quote_data())
        await service.create_quote(quote_data())
        await service.approve_quote(first.id)

        counts = await service.status_counts()

        assert counts.pending == 1
        assert counts.approved == 1
        assert counts.total == 2

    @pytest.mark.asyncio
    async def test_list_filters_by_dealer(self, service, quote_data):
        await service.create_quote(quote_data())

        assert len(await service.list_quotes(dealer_id="dealer-milano")) == 1
        assert await service.list_quotes(dealer_id="dealer-roma") == []
        assert await service.list_quotes(status=QuoteStatus.CONVERTED) == []


# ============================================================================
# Conversion
# ============================================================================


class TestQuoteConversion:
    @pytest.mark.asyncio
    async def test_convert_creates_contract(self, service, registry, quote_data, contractor):
        quote = await service.create_quote(quote_data())
        await service.approve_quote(quote.id)

        converted, contract = await service.convert_to_contract(quote.id, contractor)

        assert converted.status == QuoteStatus.CONVERTED
        assert contract.status == ContractStatus.ACTIVE
        assert contract.dealer_id == quote.dealer_id
        assert contract.vehicle_id == quote.vehicle_id
        assert contract.contract_details["quoteId"] == quote.id
        assert contract.contract_details["contractor"]["firstName"] == "Giulia"
        assert Decimal(contract.contract_details["finalPrice"]) == Decimal("22350")
        assert len(await registry.contracts.get_all()) == 1

    @pytest.mark.asyncio
    async def test_converted_quote_cannot_be_converted_again(
        self, service, quote_data, contractor
    ):
        quote = await service.create_quote(quote_data())
        await service.convert_to_contract(quote.id, contractor)

        with pytest.raises(QuoteTransitionError):
            await service.convert_to_contract(quote.id, contractor)

    @pytest.mark.asyncio
    async def test_failed_contract_restores_quote_status(
        self, service, registry, quote_data, contractor
    ):
        quote = await service.create_quote(quote_data())
        await service.approve_quote(quote.id)

        with patch.object(
            registry.contracts,
            "create",
            AsyncMock(side_effect=RepositoryError("contracts table unavailable")),
        ):
            with pytest.raises(RepositoryError):
                await service.convert_to_contract(quote.id, contractor)

        assert (await service.get_quote(quote.id)).status == QuoteStatus.APPROVED
        assert await registry.contracts.get_all() == []
