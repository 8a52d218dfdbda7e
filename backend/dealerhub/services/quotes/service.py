"""
Quote lifecycle service.

Creates quotes priced with the pricing engine, recomputes the final price
on every edit, and moves quotes through their lifecycle on explicit dealer
actions. Converting a quote creates the dealer contract for the sale.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from dealerhub.core.logging import get_logger
from dealerhub.repositories.base import RepositoryError
from dealerhub.repositories.registry import RepositoryRegistry
from dealerhub.schemas.contracts import ContractDetails, DealerContract
from dealerhub.schemas.quotes import (
    ContractorData,
    Quote,
    QuoteCreate,
    QuotePriceBreakdown,
    QuoteStatusCounts,
    QuoteUpdate,
)
from dealerhub.services.catalog.service import CatalogService
from dealerhub.services.contracts.enums import ContractStatus
from dealerhub.services.pricing.pricing_engine import PricingEngine
from dealerhub.services.quotes.enums import (
    QuoteStatus,
    get_allowed_quote_transitions,
    validate_quote_status_transition,
)

logger = get_logger(__name__)

NULLABLE_FIELDS = frozenset(
    {
        "customer_email",
        "customer_phone",
        "notes",
        "trade_in_brand",
        "trade_in_model",
        "trade_in_year",
        "trade_in_km",
    }
)


class QuoteServiceError(Exception):
    """Base exception for quote service errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


class QuoteValidationError(QuoteServiceError):
    def __init__(self, message: str, **context: Any):
        super().__init__(message, code="QUOTE_VALIDATION_ERROR", **context)


class QuoteTransitionError(QuoteServiceError):
    """Raised when a quote cannot move to the requested status."""

    def __init__(self, quote_id: str, current: QuoteStatus, target: QuoteStatus):
        super().__init__(
            f"Invalid transition from {current.value} to {target.value}",
            code="QUOTE_INVALID_TRANSITION",
            quote_id=quote_id,
            current_status=current.value,
            target_status=target.value,
            allowed_transitions=sorted(s.value for s in get_allowed_quote_transitions(current)),
        )
        self.current_state = current
        self.target_state = target


class QuoteService:
    """Business logic for quotes and their conversion into contracts."""

    def __init__(
        self,
        repositories: RepositoryRegistry,
        engine: Optional[PricingEngine] = None,
    ):
        self.repositories = repositories
        self.engine = engine or PricingEngine()
        self.catalog = CatalogService(repositories)

    def _final_price(self, values: dict[str, Any]) -> QuotePriceBreakdown:
        return self.engine.calculate_quote_price(
            base_price=values["price"],
            accessory_total=values["accessory_price"],
            discount=values["discount"],
            license_plate_bonus=values["license_plate_bonus"],
            trade_in_bonus=values["trade_in_bonus"],
            trade_in_value=values["trade_in_value"],
            safety_kit=values["safety_kit"],
            trade_in_handling_fee=values["trade_in_handling_fee"],
            road_preparation_fee=values["road_preparation_fee"],
        )

    async def _accessory_price(self, vehicle_id: str, accessories: list[str]):
        vehicle = await self.repositories.vehicles.get_by_id(vehicle_id)
        catalog = await self.catalog.load_snapshot()
        return self.engine.accessories_total(
            catalog,
            vehicle.model,
            vehicle.trim,
            accessories,
            stock_accessories=vehicle.accessories,
        )

    async def list_quotes(
        self,
        status: Optional[QuoteStatus] = None,
        dealer_id: Optional[str] = None,
    ) -> list[Quote]:
        filters: dict[str, Any] = {}
        if status is not None:
            filters["status"] = status
        if dealer_id:
            filters["dealer_id"] = dealer_id

        quotes = (
            await self.repositories.quotes.find_by(**filters)
            if filters
            else await self.repositories.quotes.get_all()
        )
        return sorted(quotes, key=lambda quote: quote.created_at, reverse=True)

    async def get_quote(self, quote_id: str) -> Quote:
        return await self.repositories.quotes.get_by_id(quote_id)

    async def create_quote(self, data: QuoteCreate) -> Quote:
        """
        Create a pending quote.

        The base price defaults to the vehicle list price; the accessory
        price sums the selected accessories not already fitted on the vehicle.

        Raises:
            RecordNotFoundError: If the vehicle or dealer does not exist
            QuoteValidationError: If no price can be derived
        """
        vehicle = await self.repositories.vehicles.get_by_id(data.vehicle_id)
        await self.repositories.dealers.get_by_id(data.dealer_id)

        values = data.model_dump()
        if values["price"] is None:
            values["price"] = vehicle.price
        if not data.manual_entry and not values["price"]:
            raise QuoteValidationError(
                "Vehicle has no list price yet",
                vehicle_id=vehicle.id,
                location=vehicle.location,
            )

        values["accessory_price"] = await self._accessory_price(vehicle.id, data.accessories)
        breakdown = self._final_price(values)
        values["road_preparation_fee"] = breakdown.road_preparation_fee
        values["final_price"] = breakdown.final_price
        values["status"] = QuoteStatus.PENDING
        values["created_at"] = datetime.now(timezone.utc)

        quote = await self.repositories.quotes.create(values)
        logger.info(
            "Quote created",
            quote_id=quote.id,
            vehicle_id=quote.vehicle_id,
            dealer_id=quote.dealer_id,
            final_price=str(quote.final_price),
        )
        return quote

    async def update_quote(self, quote_id: str, data: QuoteUpdate) -> Quote:
        """
        Edit a quote and recompute its final price.

        Raises:
            QuoteValidationError: If the quote is already closed
        """
        quote = await self.repositories.quotes.get_by_id(quote_id)
        if quote.status.is_terminal():
            raise QuoteValidationError(
                "Closed quotes cannot be edited",
                quote_id=quote_id,
                status=quote.status.value,
            )

        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if "accessories" in changes:
            changes["accessory_price"] = await self._accessory_price(
                quote.vehicle_id, changes["accessories"]
            )

        merged = quote.model_dump()
        merged.update(changes)
        # trade-in details only exist on quotes that carry a trade-in
        if not merged["has_trade_in"]:
            changes.update(
                trade_in_brand=None,
                trade_in_model=None,
                trade_in_year=None,
                trade_in_km=None,
                trade_in_value=Decimal("0"),
            )
            merged.update(changes)
        breakdown = self._final_price(merged)
        changes["road_preparation_fee"] = breakdown.road_preparation_fee
        changes["final_price"] = breakdown.final_price

        updated = await self.repositories.quotes.update(quote_id, changes)
        logger.info(
            "Quote updated",
            quote_id=quote_id,
            fields=sorted(changes),
            final_price=str(updated.final_price),
        )
        return updated

    async def _transition(
        self, quote_id: str, target: QuoteStatus, **changes: Any
    ) -> Quote:
        quote = await self.repositories.quotes.get_by_id(quote_id)
        if not validate_quote_status_transition(quote.status, target):
            logger.warning(
                "Quote transition rejected",
                quote_id=quote_id,
                current_status=quote.status.value,
                target_status=target.value,
            )
            raise QuoteTransitionError(quote_id, quote.status, target)

        updated = await self.repositories.quotes.update(quote_id, {"status": target, **changes})
        logger.info(
            "Quote status changed",
            quote_id=quote_id,
            transition=f"{quote.status.value}->{target.value}",
        )
        return updated

    async def _restore_status(self, quote_id: str, status: QuoteStatus) -> None:
        try:
            await self.repositories.quotes.update(quote_id, {"status": status})
        except RepositoryError as e:
            logger.error(
                "Failed to restore quote status",
                quote_id=quote_id,
                status=status.value,
                error=str(e),
            )
            return
        logger.warning("Quote status restored", quote_id=quote_id, status=status.value)

    async def approve_quote(self, quote_id: str) -> Quote:
        return await self._transition(quote_id, QuoteStatus.APPROVED)

    async def reject_quote(self, quote_id: str, reason: str) -> Quote:
        """
        Reject a quote with a mandatory reason.

        Raises:
            QuoteValidationError: If the reason is blank
        """
        if not reason or not reason.strip():
            raise QuoteValidationError("Rejection reason is required", quote_id=quote_id)
        return await self._transition(
            quote_id, QuoteStatus.REJECTED, rejection_reason=reason.strip()
        )

    async def revert_to_pending(self, quote_id: str) -> Quote:
        return await self._transition(quote_id, QuoteStatus.PENDING)

    async def convert_to_contract(
        self, quote_id: str, contractor: ContractorData
    ) -> tuple[Quote, DealerContract]:
        """
        Mark a quote converted and open the matching dealer contract.

        Returns:
            The converted quote and the new contract
        """
        previous_status = (await self.repositories.quotes.get_by_id(quote_id)).status
        quote = await self._transition(quote_id, QuoteStatus.CONVERTED)

        details = ContractDetails(
            contractor=contractor,
            customer_name=quote.customer_name,
            quote_id=quote.id,
            price=quote.price,
            discount=quote.discount,
            final_price=quote.final_price,
        )
        try:
            contract = await self.repositories.contracts.create(
                {
                    "dealer_id": quote.dealer_id,
                    "vehicle_id": quote.vehicle_id,
                    "contract_date": datetime.now(timezone.utc),
                    "contract_details": details.model_dump(mode="json", by_alias=True),
                    "status": ContractStatus.ACTIVE,
                }
            )
        except RepositoryError:
            await self._restore_status(quote_id, previous_status)
            raise

        logger.info("Quote converted to contract", quote_id=quote_id, contract_id=contract.id)
        return quote, contract

    async def delete_quote(self, quote_id: str, confirm: bool) -> None:
        """
        Permanently delete a quote.

        Raises:
            QuoteValidationError: If the deletion was not confirmed
        """
        if not confirm:
            raise QuoteValidationError(
                "Quote deletion must be confirmed", quote_id=quote_id
            )
        await self.repositories.quotes.delete(quote_id)
        logger.info("Quote deleted", quote_id=quote_id)

    async def status_counts(self, dealer_id: Optional[str] = None) -> QuoteStatusCounts:
        quotes = await self.list_quotes(dealer_id=dealer_id)
        counts = {status.value: 0 for status in QuoteStatus}
        for quote in quotes:
            counts[quote.status.value] += 1
        return QuoteStatusCounts(**counts, total=len(quotes))
