"""Quote status enum and transition table.

Quotes only move on explicit dealer actions: approve, reject, revert to
pending and convert to a contract.
"""

from enum import Enum
from typing import Dict, Set


class QuoteStatus(str, Enum):
    """Quote lifecycle status.

    Valid transitions:
    - PENDING -> APPROVED, REJECTED, CONVERTED
    - APPROVED -> PENDING, CONVERTED
    - REJECTED -> (terminal state)
    - CONVERTED -> (terminal state)
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONVERTED = "converted"

    def is_terminal(self) -> bool:
        """Check if status is a terminal state."""
        return self in {QuoteStatus.REJECTED, QuoteStatus.CONVERTED}

    @property
    def display_name(self) -> str:
        return {
            QuoteStatus.PENDING: "In attesa",
            QuoteStatus.APPROVED: "Approvato",
            QuoteStatus.REJECTED: "Rifiutato",
            QuoteStatus.CONVERTED: "Convertito",
        }[self]


QUOTE_STATUS_TRANSITIONS: Dict[QuoteStatus, Set[QuoteStatus]] = {
    QuoteStatus.PENDING: {
        QuoteStatus.APPROVED,
        QuoteStatus.REJECTED,
        QuoteStatus.CONVERTED,
    },
    QuoteStatus.APPROVED: {
        QuoteStatus.PENDING,
        QuoteStatus.CONVERTED,
    },
    QuoteStatus.REJECTED: set(),  # Terminal
    QuoteStatus.CONVERTED: set(),  # Terminal
}


def validate_quote_status_transition(current: QuoteStatus, new: QuoteStatus) -> bool:
    """Validate if quote status transition is allowed."""
    return new in QUOTE_STATUS_TRANSITIONS.get(current, set())


def get_allowed_quote_transitions(current: QuoteStatus) -> Set[QuoteStatus]:
    """Get all allowed transitions from current quote status."""
    return QUOTE_STATUS_TRANSITIONS.get(current, set()).copy()
