"""
Quote API endpoints.

Quote lifecycle (approve, reject, revert, convert), editing with final price
recomputation, dealer statistics and the printable quote document.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from dealerhub.api.deps import DocumentServiceDep, QuoteServiceDep
from dealerhub.core.logging import get_logger
from dealerhub.schemas.common import ListResponse
from dealerhub.schemas.contracts import QuoteConversion
from dealerhub.schemas.quotes import (
    Quote,
    QuoteConvertRequest,
    QuoteCreate,
    QuoteRejectRequest,
    QuoteStatusCounts,
    QuoteUpdate,
)
from dealerhub.services.quotes.enums import QuoteStatus
from dealerhub.services.quotes.service import (
    QuoteServiceError,
    QuoteTransitionError,
    QuoteValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])


def _quote_http_error(error: QuoteServiceError) -> HTTPException:
    logger.warning("Quote request rejected", error=str(error), code=error.code, **error.context)
    if isinstance(error, QuoteTransitionError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(error),
                "current_state": error.current_state.value,
                "target_state": error.target_state.value,
            },
        )
    if isinstance(error, QuoteValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error)
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get(
    "",
    response_model=ListResponse[Quote],
    summary="List quotes",
    description="Newest first, optionally filtered by status or dealer",
)
async def list_quotes(
    service: QuoteServiceDep,
    quote_status: Annotated[QuoteStatus | None, Query(alias="status")] = None,
    dealer_id: Annotated[str | None, Query(alias="dealerId")] = None,
) -> ListResponse[Quote]:
    items = await service.list_quotes(status=quote_status, dealer_id=dealer_id)
    return ListResponse[Quote](items=items, total=len(items))


@router.get("/stats", response_model=QuoteStatusCounts, summary="Quote counts by status")
async def quote_stats(
    service: QuoteServiceDep,
    dealer_id: Annotated[str | None, Query(alias="dealerId")] = None,
) -> QuoteStatusCounts:
    return await service.status_counts(dealer_id=dealer_id)


@router.get("/{quote_id}", response_model=Quote, summary="Get quote")
async def get_quote(quote_id: str, service: QuoteServiceDep) -> Quote:
    return await service.get_quote(quote_id)


@router.post(
    "",
    response_model=Quote,
    status_code=status.HTTP_201_CREATED,
    summary="Create quote",
    description="Create a pending quote; the final price is computed server-side",
)
async def create_quote(request: QuoteCreate, service: QuoteServiceDep) -> Quote:
    try:
        return await service.create_quote(request)
    except QuoteServiceError as e:
        raise _quote_http_error(e) from e


@router.patch("/{quote_id}", response_model=Quote, summary="Update quote")
async def update_quote(quote_id: str, request: QuoteUpdate, service: QuoteServiceDep) -> Quote:
    try:
        return await service.update_quote(quote_id, request)
    except QuoteServiceError as e:
        raise _quote_http_error(e) from e


@router.delete(
    "/{quote_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete quote",
    description="Permanent deletion; requires confirm=true",
)
async def delete_quote(
    quote_id: str,
    service: QuoteServiceDep,
    confirm: Annotated[bool, Query()] = False,
) -> None:
    try:
        await service.delete_quote(quote_id, confirm)
    except QuoteServiceError as e:
        raise _quote_http_error(e) from e


@router.post("/{quote_id}/approve", response_model=Quote, summary="Approve quote")
async def approve_quote(quote_id: str, service: QuoteServiceDep) -> Quote:
    try:
        return await service.approve_quote(quote_id)
    except QuoteServiceError as e:
        raise _quote_http_error(e) from e


@router.post("/{quote_id}/reject", response_model=Quote, summary="Reject quote")
async def reject_quote(
    quote_id: str, request: QuoteRejectRequest, service: QuoteServiceDep
) -> Quote:
    try:
        return await service.reject_quote(quote_id, request.reason)
    except QuoteServiceError as e:
        raise _quote_http_error(e) from e


@router.post(
    "/{quote_id}/revert",
    response_model=Quote,
    summary="Move an approved quote back to pending",
)
async def revert_quote(quote_id: str, service: QuoteServiceDep) -> Quote:
    try:
        return await service.revert_to_pending(quote_id)
    except QuoteServiceError as e:
        raise _quote_http_error(e) from e


@router.post(
    "/{quote_id}/convert",
    response_model=QuoteConversion,
    status_code=status.HTTP_201_CREATED,
    summary="Convert quote to contract",
)
async def convert_quote(
    quote_id: str, request: QuoteConvertRequest, service: QuoteServiceDep
) -> QuoteConversion:
    try:
        quote, contract = await service.convert_to_contract(quote_id, request.contractor)
    except QuoteServiceError as e:
        raise _quote_http_error(e) from e
    return QuoteConversion(quote=quote, contract=contract)


@router.get(
    "/{quote_id}/document",
    response_class=HTMLResponse,
    summary="Printable quote",
)
async def quote_document(quote_id: str, documents: DocumentServiceDep) -> HTMLResponse:
    return HTMLResponse(content=await documents.render_quote(quote_id))
