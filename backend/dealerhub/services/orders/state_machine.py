"""Order state machine implementation with transition validation.

This module implements the OrderStateMachine class, which checks order
lifecycle transitions against the transition table and the per-transition
guards. Persisting the new status is left to the order service.
"""

from typing import Any, Callable, Dict, Optional

from dealerhub.core.logging import get_logger
from dealerhub.schemas.orders import Order
from dealerhub.services.orders.enums import (
    OrderStatus,
    get_allowed_order_transitions,
    validate_order_status_transition,
)

logger = get_logger(__name__)


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        message: str,
        current_state: OrderStatus,
        target_state: OrderStatus,
        **context: Any
    ):
        super().__init__(message)
        self.current_state = current_state
        self.target_state = target_state
        self.context = context


class OrderStateMachine:
    """State machine for order lifecycle transitions.

    Guards are keyed by (current, target) and return the reason the
    transition is blocked, or None when it may proceed.
    """

    def __init__(self):
        self._transition_guards: Dict[
            tuple[OrderStatus, OrderStatus],
            Callable[[Order], Optional[str]]
        ] = {
            (OrderStatus.PROCESSING, OrderStatus.DELIVERED): self._guard_odl_generated,
        }

    def validate_transition(self, order: Order, target_status: OrderStatus) -> None:
        """Validate if transition to target status is allowed.

        Args:
            order: Order to validate
            target_status: Desired target status

        Raises:
            StateTransitionError: If the transition is not in the table or
                a guard blocks it
        """
        current_status = order.status

        if not validate_order_status_transition(current_status, target_status):
            allowed = get_allowed_order_transitions(current_status)
            raise StateTransitionError(
                f"Invalid transition from {current_status.value} to "
                f"{target_status.value}",
                current_state=current_status,
                target_state=target_status,
                order_id=order.id,
                allowed_transitions=sorted(s.value for s in allowed)
            )

        guard = self._transition_guards.get((current_status, target_status))
        if guard is not None:
            blocked = guard(order)
            if blocked:
                logger.warning(
                    "Order transition blocked by guard",
                    order_id=order.id,
                    transition=f"{current_status.value}->{target_status.value}",
                    reason=blocked
                )
                raise StateTransitionError(
                    blocked,
                    current_state=current_status,
                    target_state=target_status,
                    order_id=order.id,
                    guard_failed=True
                )

        logger.debug(
            "State transition validated",
            order_id=order.id,
            transition=f"{current_status.value}->{target_status.value}"
        )

    # Transition Guards

    def _guard_odl_generated(self, order: Order) -> Optional[str]:
        """Delivery needs the work order (ODL) to exist."""
        if not order.details.odl_generated:
            return "ODL not generated"
        return None
