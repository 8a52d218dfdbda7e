"""
Defect report API endpoints.

Dealers open reports on vehicles received damaged or non-conforming and
attach the transport document, the repair quote and photos.
"""

from typing import Annotated

from fastapi import APIRouter, File, Query, UploadFile, status

from dealerhub.api.deps import DefectServiceDep
from dealerhub.core.logging import get_logger
from dealerhub.schemas.common import ListResponse
from dealerhub.schemas.defect_reports import (
    DefectReport,
    DefectReportCreate,
    DefectReportStats,
    DefectReportUpdate,
)
from dealerhub.services.defects.enums import DefectStatus
from dealerhub.services.defects.service import AttachmentKind

logger = get_logger(__name__)

router = APIRouter(prefix="/defect-reports", tags=["defect-reports"])


@router.get(
    "",
    response_model=ListResponse[DefectReport],
    summary="List defect reports",
    description="Newest first, optionally filtered by dealer or status",
)
async def list_defect_reports(
    service: DefectServiceDep,
    dealer_id: Annotated[str | None, Query(alias="dealerId")] = None,
    report_status: Annotated[DefectStatus | None, Query(alias="status")] = None,
) -> ListResponse[DefectReport]:
    items = await service.list_reports(dealer_id=dealer_id, status=report_status)
    return ListResponse[DefectReport](items=items, total=len(items))


@router.get("/stats", response_model=DefectReportStats, summary="Defect report statistics")
async def defect_report_stats(
    service: DefectServiceDep,
    dealer_id: Annotated[str | None, Query(alias="dealerId")] = None,
) -> DefectReportStats:
    return await service.stats(dealer_id=dealer_id)


@router.get("/{report_id}", response_model=DefectReport, summary="Get defect report")
async def get_defect_report(report_id: str, service: DefectServiceDep) -> DefectReport:
    return await service.get_report(report_id)


@router.post(
    "",
    response_model=DefectReport,
    status_code=status.HTTP_201_CREATED,
    summary="Open defect report",
)
async def create_defect_report(
    request: DefectReportCreate, service: DefectServiceDep
) -> DefectReport:
    return await service.create_report(request)


@router.patch("/{report_id}", response_model=DefectReport, summary="Update defect report")
async def update_defect_report(
    report_id: str, request: DefectReportUpdate, service: DefectServiceDep
) -> DefectReport:
    return await service.update_report(report_id, request)


@router.delete(
    "/{report_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete defect report",
)
async def delete_defect_report(report_id: str, service: DefectServiceDep) -> None:
    await service.delete_report(report_id)


@router.post(
    "/{report_id}/attachments/{kind}",
    response_model=DefectReport,
    summary="Upload a defect report attachment",
)
async def upload_defect_attachment(
    report_id: str,
    kind: AttachmentKind,
    service: DefectServiceDep,
    file: Annotated[UploadFile, File(description="Attachment file")],
) -> DefectReport:
    logger.info(
        "Processing defect attachment upload",
        report_id=report_id,
        kind=kind.value,
        filename=file.filename,
    )
    content = await file.read()
    return await service.upload_attachment(
        report_id, kind, file.filename or kind.value, content, file.content_type
    )
