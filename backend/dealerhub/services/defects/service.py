"""
Defect report service.

Dealers open reports on received vehicles; each report gets the next
sequential case number. Attachments (transport document, repair quote,
photos) go through the blob storage backend and their URLs are stored on
the report. Statistics summarize open, closed, approved and paid reports.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from dealerhub.core.logging import get_logger
from dealerhub.repositories.registry import RepositoryRegistry
from dealerhub.schemas.defect_reports import (
    DefectReport,
    DefectReportCreate,
    DefectReportStats,
    DefectReportUpdate,
)
from dealerhub.services.defects.enums import (
    APPROVED_STATUSES,
    CLOSED_STATUSES,
    DefectStatus,
)
from dealerhub.services.storage.blob_storage import BlobStorage, create_blob_storage

logger = get_logger(__name__)

ATTACHMENT_FOLDER = "defect-reports"


class AttachmentKind(str, Enum):
    TRANSPORT_DOCUMENT = "transport_document"
    REPAIR_QUOTE = "repair_quote"
    PHOTO = "photo"


class DefectServiceError(Exception):
    """Base exception for defect report service errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


class DefectService:
    """Business logic for defect reports."""

    def __init__(
        self,
        repositories: RepositoryRegistry,
        storage: Optional[BlobStorage] = None,
    ):
        self.repositories = repositories
        self.storage = storage or create_blob_storage()

    async def list_reports(
        self,
        dealer_id: Optional[str] = None,
        status: Optional[DefectStatus] = None,
    ) -> list[DefectReport]:
        filters: dict[str, Any] = {}
        if dealer_id:
            filters["dealer_id"] = dealer_id
        if status is not None:
            filters["status"] = status

        reports = (
            await self.repositories.defect_reports.find_by(**filters)
            if filters
            else await self.repositories.defect_reports.get_all()
        )
        return sorted(reports, key=lambda report: report.created_at, reverse=True)

    async def get_report(self, report_id: str) -> DefectReport:
        return await self.repositories.defect_reports.get_by_id(report_id)

    async def _next_case_number(self) -> int:
        reports = await self.repositories.defect_reports.get_all()
        return max((report.case_number for report in reports), default=0) + 1

    async def create_report(self, data: DefectReportCreate) -> DefectReport:
        """
        Open a defect report with the next case number.

        Raises:
            RecordNotFoundError: If the dealer or the referenced vehicle does not exist
        """
        await self.repositories.dealers.get_by_id(data.dealer_id)
        if data.vehicle_id:
            await self.repositories.vehicles.get_by_id(data.vehicle_id)

        values = data.model_dump()
        values["case_number"] = await self._next_case_number()
        report = await self.repositories.defect_reports.create(values)

        logger.info(
            "Defect report created",
            report_id=report.id,
            case_number=report.case_number,
            dealer_id=report.dealer_id,
            reason=report.reason.value,
        )
        return report

    async def update_report(self, report_id: str, data: DefectReportUpdate) -> DefectReport:
        changes = data.model_dump(exclude_unset=True)
        # only the vehicle link and the payment date can be cleared
        changes = {
            key: value
            for key, value in changes.items()
            if value is not None or key in ("vehicle_id", "payment_date")
        }

        report = await self.repositories.defect_reports.update(report_id, changes)
        logger.info(
            "Defect report updated",
            report_id=report_id,
            fields=sorted(changes),
            status=report.status.value,
        )
        return report

    async def delete_report(self, report_id: str) -> None:
        await self.repositories.defect_reports.delete(report_id)
        logger.info("Defect report deleted", report_id=report_id)

    async def upload_attachment(
        self,
        report_id: str,
        kind: AttachmentKind,
        filename: str,
        content: bytes,
        content_type: Optional[str],
    ) -> DefectReport:
        """
        Store an attachment and link it to the report.

        Transport documents and repair quotes replace the previous file;
        photos are appended to the photo report.
        """
        report = await self.repositories.defect_reports.get_by_id(report_id)
        url = await self.storage.upload(
            f"{ATTACHMENT_FOLDER}/{report_id}/{kind.value}", filename, content, content_type
        )

        if kind == AttachmentKind.PHOTO:
            changes = {"photo_report_urls": [*report.photo_report_urls, url]}
        else:
            changes = {f"{kind.value}_url": url}

        updated = await self.repositories.defect_reports.update(report_id, changes)
        logger.info("Defect attachment uploaded", report_id=report_id, kind=kind.value, url=url)
        return updated

    async def stats(self, dealer_id: Optional[str] = None) -> DefectReportStats:
        reports = await self.list_reports(dealer_id=dealer_id)
        return DefectReportStats(
            open_reports=sum(1 for r in reports if r.status == DefectStatus.OPEN),
            closed_reports=sum(1 for r in reports if r.status in CLOSED_STATUSES),
            approved_reports=sum(1 for r in reports if r.status in APPROVED_STATUSES),
            total_paid=sum(
                (r.approved_repair_value for r in reports if r.payment_date is not None),
                Decimal("0"),
            ),
        )
