"""Dealer contract status enum."""

from enum import Enum


class ContractStatus(str, Enum):
    ACTIVE = "attivo"
    COMPLETED = "completato"
