"""Order status and funding enums for order lifecycle management.

This module defines the order status with its transition table and the
funding types a dealer can pick for an order.
"""

from enum import Enum
from typing import Dict, Set


class OrderStatus(str, Enum):
    """Order lifecycle status.

    Valid transitions:
    - PROCESSING -> DELIVERED (requires a generated ODL), CANCELLED
    - DELIVERED -> (terminal state)
    - CANCELLED -> (terminal state)
    """

    PROCESSING = "processing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if status is a terminal state."""
        return self in {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

    @property
    def display_name(self) -> str:
        return {
            OrderStatus.PROCESSING: "In lavorazione",
            OrderStatus.DELIVERED: "Consegnato",
            OrderStatus.CANCELLED: "Cancellato",
        }[self]


class FundingType(str, Enum):
    """How the dealer pays for the ordered vehicle."""

    FACTOR = "Factor"
    CAPTIVE = "Captive"
    DIRECT_PURCHASE = "Acquisto Diretto"


ORDER_STATUS_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PROCESSING: {
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def validate_order_status_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """Validate if order status transition is allowed.

    Args:
        current: Current order status
        new: Desired new status

    Returns:
        True if transition is valid
    """
    return new in ORDER_STATUS_TRANSITIONS.get(current, set())


def get_allowed_order_transitions(current: OrderStatus) -> Set[OrderStatus]:
    """Get all allowed transitions from current order status."""
    return ORDER_STATUS_TRANSITIONS.get(current, set()).copy()
