"""
Dealer management API endpoints.

Dealers are always returned without their password hash.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from dealerhub.api.deps import DealerServiceDep
from dealerhub.core.logging import get_logger
from dealerhub.schemas.common import ListResponse
from dealerhub.schemas.dealers import DealerCreate, DealerCredit, DealerPublic, DealerUpdate
from dealerhub.services.dealers.service import (
    DealerServiceError,
    DuplicateDealerEmailError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/dealers", tags=["dealers"])


def _dealer_http_error(error: DealerServiceError) -> HTTPException:
    logger.warning("Dealer request rejected", error=str(error), code=error.code, **error.context)
    if isinstance(error, DuplicateDealerEmailError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def _public(dealer) -> DealerPublic:
    return DealerPublic.model_validate(dealer.model_dump())


@router.get(
    "",
    response_model=ListResponse[DealerPublic],
    summary="List dealers",
    description="Dealers sorted by company name",
)
async def list_dealers(
    service: DealerServiceDep,
    active_only: Annotated[bool, Query(alias="activeOnly")] = False,
) -> ListResponse[DealerPublic]:
    dealers = await service.list_dealers(active_only=active_only)
    return ListResponse[DealerPublic](items=[_public(d) for d in dealers], total=len(dealers))


@router.get("/{dealer_id}", response_model=DealerPublic, summary="Get dealer")
async def get_dealer(dealer_id: str, service: DealerServiceDep) -> DealerPublic:
    return _public(await service.get_dealer(dealer_id))


@router.post(
    "",
    response_model=DealerPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Create dealer",
)
async def create_dealer(request: DealerCreate, service: DealerServiceDep) -> DealerPublic:
    try:
        return _public(await service.create_dealer(request))
    except DealerServiceError as e:
        raise _dealer_http_error(e) from e


@router.patch("/{dealer_id}", response_model=DealerPublic, summary="Update dealer")
async def update_dealer(
    dealer_id: str, request: DealerUpdate, service: DealerServiceDep
) -> DealerPublic:
    try:
        return _public(await service.update_dealer(dealer_id, request))
    except DealerServiceError as e:
        raise _dealer_http_error(e) from e


@router.delete(
    "/{dealer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete dealer",
)
async def delete_dealer(dealer_id: str, service: DealerServiceDep) -> None:
    await service.delete_dealer(dealer_id)


@router.post("/{dealer_id}/logo", response_model=DealerPublic, summary="Upload dealer logo")
async def upload_logo(
    dealer_id: str,
    service: DealerServiceDep,
    file: Annotated[UploadFile, File(description="PNG, JPEG, SVG or WebP image")],
) -> DealerPublic:
    logger.info(
        "Processing dealer logo upload",
        dealer_id=dealer_id,
        filename=file.filename,
        content_type=file.content_type,
    )
    content = await file.read()
    try:
        dealer = await service.upload_logo(
            dealer_id, file.filename or "logo", content, file.content_type
        )
    except DealerServiceError as e:
        raise _dealer_http_error(e) from e
    return _public(dealer)


@router.get(
    "/{dealer_id}/credit",
    response_model=DealerCredit,
    summary="Dealer credit position",
    description="Available credit and, for an amount, whether an order of that size fits",
)
async def dealer_credit(
    dealer_id: str,
    service: DealerServiceDep,
    amount: Annotated[Decimal | None, Query(ge=0)] = None,
) -> DealerCredit:
    return await service.credit_position(dealer_id, amount)
