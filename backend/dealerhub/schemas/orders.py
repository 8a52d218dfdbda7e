"""
Order management Pydantic schemas for API request/response validation.

An order carries its administrative checklist in ``details``; delivery is
only allowed once ``details.odl_generated`` is set.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from dealerhub.schemas.common import CamelModel, Money, Record
from dealerhub.services.orders.enums import FundingType, OrderStatus


class OrderDetails(CamelModel):
    """Administrative checklist of an order."""

    is_licensable: bool = False
    has_proforma: bool = False
    is_paid: bool = False
    payment_date: Optional[datetime] = None
    is_invoiced: bool = False
    invoice_number: Optional[str] = Field(None, max_length=50)
    invoice_date: Optional[datetime] = None
    has_conformity: bool = False
    previous_chassis: Optional[str] = Field(None, max_length=50)
    chassis: Optional[str] = Field(None, max_length=50)
    funding_type: Optional[FundingType] = None
    transport_costs: Money = Field(default=Decimal("0"))
    restoration_costs: Money = Field(default=Decimal("0"))
    odl_generated: bool = False
    notes: Optional[str] = None


class OrderDetailsUpdate(CamelModel):
    """Partial update of the administrative checklist."""

    is_licensable: Optional[bool] = None
    has_proforma: Optional[bool] = None
    is_paid: Optional[bool] = None
    payment_date: Optional[datetime] = None
    is_invoiced: Optional[bool] = None
    invoice_number: Optional[str] = Field(None, max_length=50)
    invoice_date: Optional[datetime] = None
    has_conformity: Optional[bool] = None
    previous_chassis: Optional[str] = Field(None, max_length=50)
    chassis: Optional[str] = Field(None, max_length=50)
    funding_type: Optional[FundingType] = None
    transport_costs: Optional[Money] = None
    restoration_costs: Optional[Money] = None
    odl_generated: Optional[bool] = None
    notes: Optional[str] = None


class OrderCreate(CamelModel):
    """Order placement request."""

    vehicle_id: str = Field(..., min_length=1)
    dealer_id: str = Field(..., min_length=1)
    quote_id: Optional[str] = None
    customer_name: str = Field(..., min_length=1, max_length=255)
    price: Optional[Money] = Field(None, description="Defaults to the vehicle list price")
    details: OrderDetails = Field(default_factory=OrderDetails)


class Order(Record):
    """Stored order with its dealer and model snapshot."""

    vehicle_id: Optional[str] = None
    dealer_id: Optional[str] = None
    quote_id: Optional[str] = None
    customer_name: str
    status: OrderStatus = OrderStatus.PROCESSING
    order_date: datetime
    delivery_date: Optional[datetime] = None
    progressive_number: int = 0
    price: Decimal = Decimal("0")
    dealer_name: Optional[str] = None
    model_name: Optional[str] = None
    plafond_dealer: Optional[Decimal] = None
    details: OrderDetails = Field(default_factory=OrderDetails)


class OrderUpdate(CamelModel):
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Money] = None


class OrderStatusCounts(CamelModel):
    processing: int = 0
    delivered: int = 0
    cancelled: int = 0
    total: int = 0
