"""
Defect report schemas.

Reports are opened by dealers on delivered vehicles and closed by an
administrator with an approved repair value and, once paid, a payment date.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from dealerhub.schemas.common import CamelModel, Money, Record
from dealerhub.services.defects.enums import DefectReason, DefectStatus


class DefectReportCreate(CamelModel):
    dealer_id: str = Field(..., min_length=1)
    dealer_name: str = Field(..., min_length=1, max_length=255)
    vehicle_id: Optional[str] = None
    email: str = Field(default="", max_length=255)
    status: DefectStatus = DefectStatus.OPEN
    reason: DefectReason
    description: str = Field(default="")
    vehicle_receipt_date: datetime
    repair_cost: Money = Field(default=Decimal("0"))
    approved_repair_value: Money = Field(default=Decimal("0"))
    spare_parts_request: str = ""
    transport_document_url: str = Field(default="", max_length=500)
    photo_report_urls: list[str] = Field(default_factory=list)
    repair_quote_url: str = Field(default="", max_length=500)
    admin_notes: str = ""


class DefectReport(DefectReportCreate, Record):
    case_number: int = Field(..., ge=1, description="Sequential case number")
    payment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DefectReportUpdate(CamelModel):
    dealer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    vehicle_id: Optional[str] = None
    email: Optional[str] = Field(None, max_length=255)
    status: Optional[DefectStatus] = None
    reason: Optional[DefectReason] = None
    description: Optional[str] = None
    vehicle_receipt_date: Optional[datetime] = None
    repair_cost: Optional[Money] = None
    approved_repair_value: Optional[Money] = None
    spare_parts_request: Optional[str] = None
    transport_document_url: Optional[str] = Field(None, max_length=500)
    photo_report_urls: Optional[list[str]] = None
    repair_quote_url: Optional[str] = Field(None, max_length=500)
    admin_notes: Optional[str] = None
    payment_date: Optional[datetime] = None


class DefectReportStats(CamelModel):
    open_reports: int = 0
    closed_reports: int = 0
    approved_reports: int = 0
    total_paid: Decimal = Decimal("0")
