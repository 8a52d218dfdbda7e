"""
Dealer, dealer contract and defect report tables.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from dealerhub.database.base import RecordRow


class DealerRow(RecordRow):
    """Dealer company with its login and credit limit."""

    __tablename__ = "dealers"

    company_name: Mapped[str] = mapped_column("companyname", String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    city: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    province: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    zip_code: Mapped[str] = mapped_column("zipcode", String(10), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column("isactive", Boolean, nullable=False, default=True)
    contact_name: Mapped[str] = mapped_column("contactname", String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    logo: Mapped[Optional[str]] = mapped_column(String(500))
    credit_limit: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))


class DealerContractRow(RecordRow):
    """Sale contract generated from a converted quote."""

    __tablename__ = "dealer_contracts"

    dealer_id: Mapped[str] = mapped_column(
        ForeignKey("dealers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # legacy column name kept from the original table
    vehicle_id: Mapped[str] = mapped_column(
        "car_id", ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False
    )
    contract_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    contract_details: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb")
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="attivo")


class DefectReportRow(RecordRow):
    """Defect claim opened by a dealer on a delivered vehicle."""

    __tablename__ = "defect_reports"

    case_number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    dealer_id: Mapped[str] = mapped_column(
        ForeignKey("dealers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dealer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    vehicle_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("vehicles.id", ondelete="SET NULL")
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="Aperta", index=True)
    reason: Mapped[str] = mapped_column(String(60), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    vehicle_receipt_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    repair_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    approved_repair_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    spare_parts_request: Mapped[str] = mapped_column(Text, nullable=False, default="")
    transport_document_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    photo_report_urls: Mapped[list[str]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )
    repair_quote_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
