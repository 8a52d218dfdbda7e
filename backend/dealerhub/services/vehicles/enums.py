"""Vehicle inventory enums."""

from enum import Enum


class VehicleStatus(str, Enum):
    """Where a vehicle stands in the sales flow.

    Only AVAILABLE vehicles can be reserved; a reserved vehicle becomes
    ORDERED when an order is placed and DELIVERED once handed over.
    """

    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    ORDERED = "ordered"
    DELIVERED = "delivered"


class OriginalStock(str, Enum):
    """Factory stock a vehicle was shipped from."""

    CHINA = "Cina"
    GERMANY = "Germania"
