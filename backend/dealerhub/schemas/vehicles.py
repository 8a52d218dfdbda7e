"""
Vehicle inventory schemas for API request/response validation.

The vehicle list price is never accepted from clients: it is recomputed by
the pricing engine every time a vehicle is saved.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from dealerhub.schemas.common import CamelModel, Money, Record
from dealerhub.services.vehicles.enums import OriginalStock, VehicleStatus


class VirtualConfig(CamelModel):
    """Configuration chosen by a dealer when reserving virtual stock."""

    trim: str = Field(..., min_length=1)
    fuel_type: str = Field(..., min_length=1)
    exterior_color: str = Field(..., min_length=1)
    transmission: str = Field(..., min_length=1)
    accessories: list[str] = Field(default_factory=list)
    price: Money = Field(default=Decimal("0"))


class VehicleCreate(CamelModel):
    """Vehicle creation request."""

    model: str = Field(..., min_length=1, max_length=100)
    trim: str = Field(default="", max_length=100)
    fuel_type: str = Field(default="", max_length=100)
    exterior_color: str = Field(default="", max_length=150)
    transmission: str = Field(default="", max_length=100)
    accessories: list[str] = Field(default_factory=list)
    location: str = Field(..., min_length=1, max_length=100)
    status: VehicleStatus = Field(default=VehicleStatus.AVAILABLE)
    telaio: str = Field(default="", max_length=50, description="Chassis number")
    date_added: date = Field(default_factory=date.today)
    year: Optional[str] = Field(None, max_length=4)
    image_url: Optional[str] = Field(None, max_length=500)
    custom_image_url: Optional[str] = Field(None, max_length=500)
    previous_chassis: Optional[str] = Field(None, max_length=50)
    original_stock: Optional[OriginalStock] = None
    estimated_arrival_days: Optional[int] = Field(None, ge=0)


class Vehicle(VehicleCreate, Record):
    """Stored vehicle with price and reservation state."""

    price: Decimal = Field(default=Decimal("0"), ge=0)
    reserved_by: Optional[str] = None
    reserved_accessories: list[str] = Field(default_factory=list)
    reservation_destination: Optional[str] = None
    reservation_timestamp: Optional[datetime] = None
    virtual_config: Optional[VirtualConfig] = None


class VehicleUpdate(CamelModel):
    """Partial vehicle update; omitted fields keep their stored value."""

    model: Optional[str] = Field(None, min_length=1, max_length=100)
    trim: Optional[str] = Field(None, max_length=100)
    fuel_type: Optional[str] = Field(None, max_length=100)
    exterior_color: Optional[str] = Field(None, max_length=150)
    transmission: Optional[str] = Field(None, max_length=100)
    accessories: Optional[list[str]] = None
    location: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[VehicleStatus] = None
    telaio: Optional[str] = Field(None, max_length=50)
    year: Optional[str] = Field(None, max_length=4)
    image_url: Optional[str] = Field(None, max_length=500)
    custom_image_url: Optional[str] = Field(None, max_length=500)
    previous_chassis: Optional[str] = Field(None, max_length=50)
    original_stock: Optional[OriginalStock] = None
    estimated_arrival_days: Optional[int] = Field(None, ge=0)


class VehicleReserveRequest(CamelModel):
    """Reservation of an available vehicle by a dealer."""

    reserved_by: str = Field(..., min_length=1, max_length=255)
    reserved_accessories: list[str] = Field(default_factory=list)
    reservation_destination: Optional[str] = Field(None, max_length=100)
    virtual_config: Optional[VirtualConfig] = None

    @field_validator("reserved_accessories")
    @classmethod
    def deduplicate_accessories(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class PriceBreakdown(CamelModel):
    """Components of a computed vehicle list price."""

    model_price: Decimal
    trim_price: Decimal
    fuel_type_adjustment: Decimal
    color_adjustment: Decimal
    transmission_adjustment: Decimal
    accessories: dict[str, Decimal] = Field(default_factory=dict)
    accessories_total: Decimal
    total: Decimal


class PriceQuoteRequest(CamelModel):
    """Ad-hoc configuration priced without saving a vehicle."""

    model: str = Field(..., min_length=1)
    trim: str = ""
    fuel_type: str = ""
    exterior_color: str = ""
    transmission: str = ""
    accessories: list[str] = Field(default_factory=list)
    location: Optional[str] = None


class PriceQuoteResponse(CamelModel):
    pending: bool = Field(..., description="True when the configuration is incomplete")
    price: Decimal
    breakdown: Optional[PriceBreakdown] = None
