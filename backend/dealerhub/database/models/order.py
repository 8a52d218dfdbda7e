"""
Order table.

Orders carry their administrative checklist (licensable, proforma,
payment, invoice, conformity, ODL) as flat columns on the same row. The
row mapper folds those columns into the nested ``details`` record.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from dealerhub.database.base import RecordRow


class OrderRow(RecordRow):
    """
    Vehicle order placed by a dealer.

    Attributes:
        status: processing, delivered or cancelled
        plafond_dealer: Dealer credit limit snapshotted at creation
        odl_generated: Work order (ODL) produced; required before delivery
    """

    __tablename__ = "orders"

    vehicle_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    dealer_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("dealers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    quote_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("quotes.id", ondelete="SET NULL"), nullable=True
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="processing", index=True
    )
    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    delivery_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    progressive_number: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, unique=True
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    dealer_name: Mapped[Optional[str]] = mapped_column(String(255))
    model_name: Mapped[Optional[str]] = mapped_column(String(100))
    plafond_dealer: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    # Administrative checklist
    is_licensable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_proforma: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_invoiced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    invoice_number: Mapped[Optional[str]] = mapped_column(String(50))
    invoice_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    has_conformity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    previous_chassis: Mapped[Optional[str]] = mapped_column(String(50))
    chassis: Mapped[Optional[str]] = mapped_column(String(50))
    funding_type: Mapped[Optional[str]] = mapped_column(String(30))
    transport_costs: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    restoration_costs: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    odl_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)


ORDER_DETAIL_COLUMNS = (
    "is_licensable",
    "has_proforma",
    "is_paid",
    "payment_date",
    "is_invoiced",
    "invoice_number",
    "invoice_date",
    "has_conformity",
    "previous_chassis",
    "chassis",
    "funding_type",
    "transport_costs",
    "restoration_costs",
    "odl_generated",
    "notes",
)
