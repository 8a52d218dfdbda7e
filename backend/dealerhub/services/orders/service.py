"""
Order service orchestrating the order lifecycle.

This module implements the OrderService class for placing orders on
vehicles, maintaining the administrative checklist, generating the work
order (ODL) and moving orders to delivered or cancelled. Delivery also moves
the vehicle to the dealer's stock; both writes succeed together or the
vehicle is restored.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from dealerhub.core.config import get_settings
from dealerhub.core.logging import get_logger
from dealerhub.repositories.base import RepositoryError
from dealerhub.repositories.registry import RepositoryRegistry
from dealerhub.schemas.orders import (
    Order,
    OrderCreate,
    OrderDetails,
    OrderDetailsUpdate,
    OrderStatusCounts,
    OrderUpdate,
)
from dealerhub.schemas.vehicles import Vehicle
from dealerhub.services.orders.enums import OrderStatus
from dealerhub.services.orders.state_machine import (
    OrderStateMachine,
    StateTransitionError,
)
from dealerhub.services.vehicles.enums import VehicleStatus

logger = get_logger(__name__)


class OrderServiceError(Exception):
    """Base exception for order service errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class OrderValidationError(OrderServiceError):
    """Raised when an order edit is not allowed."""

    pass


class OrderDeliveryError(OrderServiceError):
    """Raised when an order cannot be delivered or cancelled."""

    def __init__(self, error: StateTransitionError, order_id: str):
        context = {
            **error.context,
            "order_id": order_id,
            "current_status": error.current_state.value,
            "target_status": error.target_state.value,
        }
        super().__init__(str(error), **context)
        self.current_state = error.current_state
        self.target_state = error.target_state


class OrderService:
    """
    Order service orchestrating business logic.

    Attributes:
        repositories: Record store shared with the vehicle and dealer data
        state_machine: Transition table and guards for order status
    """

    def __init__(
        self,
        repositories: RepositoryRegistry,
        state_machine: Optional[OrderStateMachine] = None,
    ):
        self.repositories = repositories
        self.state_machine = state_machine or OrderStateMachine()
        self.settings = get_settings()

    async def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        dealer_id: Optional[str] = None,
    ) -> list[Order]:
        filters: dict[str, Any] = {}
        if status is not None:
            filters["status"] = status
        if dealer_id:
            filters["dealer_id"] = dealer_id

        if not filters:
            return await self.repositories.orders.get_all()
        return await self.repositories.orders.find_by(**filters)

    async def get_order(self, order_id: str) -> Order:
        return await self.repositories.orders.get_by_id(order_id)

    async def _next_progressive_number(self) -> int:
        orders = await self.repositories.orders.get_all()
        return max((order.progressive_number for order in orders), default=0) + 1

    async def create_order(self, data: OrderCreate) -> Order:
        """
        Place an order for a vehicle.

        The dealer name, dealer credit limit (plafond) and vehicle model are
        copied onto the order so later edits to the dealer or vehicle do not
        rewrite history. A reserved vehicle becomes ordered.

        Raises:
            RecordNotFoundError: If the vehicle or dealer does not exist
        """
        vehicle = await self.repositories.vehicles.get_by_id(data.vehicle_id)
        dealer = await self.repositories.dealers.get_by_id(data.dealer_id)

        values = data.model_dump()
        if values["price"] is None:
            values["price"] = vehicle.price
        values.update(
            status=OrderStatus.PROCESSING,
            order_date=datetime.now(timezone.utc),
            progressive_number=await self._next_progressive_number(),
            dealer_name=dealer.company_name,
            model_name=vehicle.model,
            plafond_dealer=(
                dealer.credit_limit
                if dealer.credit_limit is not None
                else self.settings.default_credit_limit
            ),
        )

        order = await self.repositories.orders.create(values)

        if vehicle.status == VehicleStatus.RESERVED:
            try:
                await self.repositories.vehicles.update(
                    vehicle.id, {"status": VehicleStatus.ORDERED}
                )
            except RepositoryError:
                await self._discard_order(order.id)
                raise

        logger.info(
            "Order created",
            order_id=order.id,
            progressive_number=order.progressive_number,
            vehicle_id=vehicle.id,
            dealer_id=dealer.id,
            price=str(order.price),
        )
        return order

    async def _discard_order(self, order_id: str) -> None:
        try:
            await self.repositories.orders.delete(order_id)
        except RepositoryError as e:
            logger.error("Failed to discard order", order_id=order_id, error=str(e))

    def _ensure_processing(self, order: Order) -> None:
        if order.status.is_terminal():
            raise OrderValidationError(
                "Only orders in processing can be edited",
                order_id=order.id,
                status=order.status.value,
            )

    async def update_order(self, order_id: str, data: OrderUpdate) -> Order:
        """
        Edit the customer name or price of an open order.

        Raises:
            OrderValidationError: If the order is delivered or cancelled
        """
        order = await self.repositories.orders.get_by_id(order_id)
        self._ensure_processing(order)

        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        updated = await self.repositories.orders.update(order_id, changes)
        logger.info("Order updated", order_id=order_id, fields=sorted(changes))
        return updated

    async def update_details(self, order_id: str, data: OrderDetailsUpdate) -> Order:
        """Merge checklist changes into the order details."""
        order = await self.repositories.orders.get_by_id(order_id)
        changes = data.model_dump(exclude_unset=True)
        details = OrderDetails.model_validate({**order.details.model_dump(), **changes})

        updated = await self.repositories.orders.update(order_id, {"details": details})
        logger.info("Order details updated", order_id=order_id, fields=sorted(changes))
        return updated

    async def generate_odl(self, order_id: str) -> Order:
        """
        Mark the work order (ODL) as generated, unlocking delivery.

        Raises:
            OrderValidationError: If the order is delivered or cancelled
        """
        order = await self.repositories.orders.get_by_id(order_id)
        self._ensure_processing(order)

        details = order.details.model_copy(update={"odl_generated": True})
        updated = await self.repositories.orders.update(order_id, {"details": details})
        logger.info("ODL generated", order_id=order_id)
        return updated

    def _validate_transition(self, order: Order, target: OrderStatus) -> None:
        try:
            self.state_machine.validate_transition(order, target)
        except StateTransitionError as e:
            raise OrderDeliveryError(e, order.id) from e

    async def mark_as_delivered(self, order_id: str) -> Order:
        """
        Deliver an order.

        The vehicle, when the order references one for a dealer, becomes
        delivered at the dealer stock location. If the order write then
        fails the vehicle is put back as it was.

        Raises:
            OrderDeliveryError: If the order is not in processing or the ODL
                has not been generated; the order is left unchanged
        """
        order = await self.repositories.orders.get_by_id(order_id)
        self._validate_transition(order, OrderStatus.DELIVERED)

        previous_vehicle: Optional[Vehicle] = None
        if order.vehicle_id and order.dealer_id:
            previous_vehicle = await self.repositories.vehicles.get_by_id(order.vehicle_id)
            await self.repositories.vehicles.update(
                order.vehicle_id,
                {
                    "status": VehicleStatus.DELIVERED,
                    "location": self.settings.dealer_stock_location,
                },
            )

        try:
            delivered = await self.repositories.orders.update(
                order_id,
                {
                    "status": OrderStatus.DELIVERED,
                    "delivery_date": datetime.now(timezone.utc),
                },
            )
        except RepositoryError:
            if previous_vehicle is not None:
                await self._restore_vehicle(previous_vehicle)
            raise

        logger.info(
            "Order delivered",
            order_id=order_id,
            vehicle_id=order.vehicle_id,
            dealer_id=order.dealer_id,
        )
        return delivered

    async def _restore_vehicle(self, vehicle: Vehicle) -> None:
        try:
            await self.repositories.vehicles.update(
                vehicle.id, {"status": vehicle.status, "location": vehicle.location}
            )
        except RepositoryError as e:
            logger.error(
                "Failed to restore vehicle after delivery error",
                vehicle_id=vehicle.id,
                error=str(e),
            )
            return
        logger.warning("Vehicle restored after delivery error", vehicle_id=vehicle.id)

    async def cancel_order(self, order_id: str) -> Order:
        """
        Cancel an order still in processing.

        Raises:
            OrderDeliveryError: If the order is already delivered or cancelled
        """
        order = await self.repositories.orders.get_by_id(order_id)
        self._validate_transition(order, OrderStatus.CANCELLED)

        cancelled = await self.repositories.orders.update(
            order_id, {"status": OrderStatus.CANCELLED}
        )
        logger.info("Order cancelled", order_id=order_id)
        return cancelled

    async def delete_order(self, order_id: str) -> None:
        await self.repositories.orders.delete(order_id)
        logger.info("Order deleted", order_id=order_id)

    async def status_counts(self, dealer_id: Optional[str] = None) -> OrderStatusCounts:
        orders = await self.list_orders(dealer_id=dealer_id)
        counts = {status.value: 0 for status in OrderStatus}
        for order in orders:
            counts[order.status.value] += 1
        return OrderStatusCounts(**counts, total=len(orders))
