"""
Quote schemas for API request/response validation.

Every amount entering a quote is non-negative; the final price is derived
server-side and never accepted from the client.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from dealerhub.schemas.common import CamelModel, Money, Record
from dealerhub.services.quotes.enums import QuoteStatus


class TradeInFields(CamelModel):
    """Trade-in vehicle offered by the customer."""

    has_trade_in: bool = False
    trade_in_brand: Optional[str] = Field(None, max_length=100)
    trade_in_model: Optional[str] = Field(None, max_length=100)
    trade_in_year: Optional[str] = Field(None, max_length=4)
    trade_in_km: Optional[int] = Field(None, ge=0)
    trade_in_value: Money = Field(default=Decimal("0"))

    @model_validator(mode="after")
    def clear_trade_in_when_absent(self) -> "TradeInFields":
        """Drop trade-in details when no trade-in is offered."""
        if not self.has_trade_in:
            self.trade_in_brand = None
            self.trade_in_model = None
            self.trade_in_year = None
            self.trade_in_km = None
            self.trade_in_value = Decimal("0")
        return self


class QuoteCreate(TradeInFields):
    """Quote creation request.

    ``price`` defaults to the vehicle list price; ``accessory_price`` is
    derived from the selected accessories.
    """

    vehicle_id: str = Field(..., min_length=1)
    dealer_id: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    price: Optional[Money] = Field(None, description="Overrides the vehicle list price")
    discount: Money = Field(default=Decimal("0"))
    accessories: list[str] = Field(default_factory=list)
    license_plate_bonus: Money = Field(default=Decimal("0"))
    trade_in_bonus: Money = Field(default=Decimal("0"))
    safety_kit: Money = Field(default=Decimal("0"))
    trade_in_handling_fee: Money = Field(default=Decimal("0"))
    road_preparation_fee: Optional[Money] = Field(
        None, description="Defaults to the configured road preparation fee"
    )
    reduced_vat: bool = False
    vat_rate: Decimal = Field(default=Decimal("22"), ge=0, le=100)
    notes: Optional[str] = None
    manual_entry: bool = False

    @field_validator("customer_email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Invalid email format")
        return v.lower()


class Quote(Record):
    """Stored quote."""

    vehicle_id: str
    dealer_id: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    price: Decimal
    discount: Decimal = Decimal("0")
    final_price: Decimal
    status: QuoteStatus = QuoteStatus.PENDING
    created_at: datetime
    rejection_reason: Optional[str] = None
    has_trade_in: bool = False
    trade_in_brand: Optional[str] = None
    trade_in_model: Optional[str] = None
    trade_in_year: Optional[str] = None
    trade_in_km: Optional[int] = None
    trade_in_value: Decimal = Decimal("0")
    reduced_vat: bool = False
    vat_rate: Decimal = Decimal("22")
    accessories: list[str] = Field(default_factory=list)
    accessory_price: Decimal = Decimal("0")
    notes: Optional[str] = None
    manual_entry: bool = False
    license_plate_bonus: Decimal = Decimal("0")
    trade_in_bonus: Decimal = Decimal("0")
    safety_kit: Decimal = Decimal("0")
    trade_in_handling_fee: Decimal = Decimal("0")
    road_preparation_fee: Decimal = Decimal("350")


class QuoteUpdate(CamelModel):
    """Partial quote update; the final price is recomputed afterwards."""

    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    price: Optional[Money] = None
    discount: Optional[Money] = None
    accessories: Optional[list[str]] = None
    license_plate_bonus: Optional[Money] = None
    trade_in_bonus: Optional[Money] = None
    safety_kit: Optional[Money] = None
    trade_in_handling_fee: Optional[Money] = None
    road_preparation_fee: Optional[Money] = None
    has_trade_in: Optional[bool] = None
    trade_in_brand: Optional[str] = Field(None, max_length=100)
    trade_in_model: Optional[str] = Field(None, max_length=100)
    trade_in_year: Optional[str] = Field(None, max_length=4)
    trade_in_km: Optional[int] = Field(None, ge=0)
    trade_in_value: Optional[Money] = None
    reduced_vat: Optional[bool] = None
    vat_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    notes: Optional[str] = None


class QuoteRejectRequest(CamelModel):
    reason: str = Field(..., min_length=1, description="Why the quote was rejected")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Rejection reason is required")
        return v


class ContractorData(CamelModel):
    """Contractor (buyer) details captured when converting a quote."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    fiscal_code: Optional[str] = Field(None, max_length=16)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=10)
    zip_code: Optional[str] = Field(None, max_length=10)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    payment_method: Optional[str] = Field(None, max_length=100)
    delivery_terms: Optional[str] = None
    notes: Optional[str] = None


class QuoteConvertRequest(CamelModel):
    contractor: ContractorData


class QuoteStatusCounts(CamelModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    converted: int = 0
    total: int = 0


class QuotePriceBreakdown(CamelModel):
    """Quote price derivation as returned by the pricing engine."""

    base_price: Decimal
    accessory_total: Decimal
    road_preparation_fee: Decimal
    total_discount: Decimal
    trade_in_value: Decimal
    safety_kit: Decimal
    trade_in_handling_fee: Decimal
    final_price: Decimal
