"""
Customer quote table.

Stores the customer, the priced vehicle, every adjustment that feeds the
final price, and the trade-in vehicle when one is offered.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from dealerhub.database.base import RecordRow


def _money(default: str = "0") -> Mapped[Decimal]:
    return mapped_column(Numeric(12, 2), nullable=False, default=Decimal(default))


class QuoteRow(RecordRow):
    """Quote issued by a dealer for one vehicle."""

    __tablename__ = "quotes"

    vehicle_id: Mapped[str] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dealer_id: Mapped[str] = mapped_column(
        ForeignKey("dealers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255))
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50))

    price: Mapped[Decimal] = _money()
    discount: Mapped[Decimal] = _money()
    final_price: Mapped[Decimal] = _money()
    accessory_price: Mapped[Decimal] = _money()
    accessories: Mapped[list[str]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )
    license_plate_bonus: Mapped[Decimal] = _money()
    trade_in_bonus: Mapped[Decimal] = _money()
    safety_kit: Mapped[Decimal] = _money()
    trade_in_handling_fee: Mapped[Decimal] = _money()
    road_preparation_fee: Mapped[Decimal] = _money("350")

    reduced_vat: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    vat_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("22")
    )

    has_trade_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    trade_in_brand: Mapped[Optional[str]] = mapped_column(String(100))
    trade_in_model: Mapped[Optional[str]] = mapped_column(String(100))
    trade_in_year: Mapped[Optional[str]] = mapped_column(String(4))
    trade_in_km: Mapped[Optional[int]] = mapped_column(Integer)
    trade_in_value: Mapped[Decimal] = _money()

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    manual_entry: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
