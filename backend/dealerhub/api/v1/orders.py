"""
Order management API endpoints.

Order placement, the administrative checklist, ODL generation and the
delivery and cancellation transitions. Delivery is refused until the ODL
has been generated.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from dealerhub.api.deps import DocumentServiceDep, OrderServiceDep
from dealerhub.core.logging import get_logger
from dealerhub.schemas.common import ListResponse
from dealerhub.schemas.orders import (
    Order,
    OrderCreate,
    OrderDetailsUpdate,
    OrderStatusCounts,
    OrderUpdate,
)
from dealerhub.services.orders.enums import OrderStatus
from dealerhub.services.orders.service import (
    OrderDeliveryError,
    OrderServiceError,
    OrderValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def _order_http_error(error: OrderServiceError) -> HTTPException:
    logger.warning("Order request rejected", error=str(error), **error.context)
    if isinstance(error, OrderDeliveryError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(error),
                "current_state": error.current_state.value,
                "target_state": error.target_state.value,
            },
        )
    if isinstance(error, OrderValidationError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get(
    "",
    response_model=ListResponse[Order],
    summary="List orders",
    description="Newest first, optionally filtered by status or dealer",
)
async def list_orders(
    service: OrderServiceDep,
    order_status: Annotated[OrderStatus | None, Query(alias="status")] = None,
    dealer_id: Annotated[str | None, Query(alias="dealerId")] = None,
) -> ListResponse[Order]:
    items = await service.list_orders(status=order_status, dealer_id=dealer_id)
    return ListResponse[Order](items=items, total=len(items))


@router.get("/stats", response_model=OrderStatusCounts, summary="Order counts by status")
async def order_stats(
    service: OrderServiceDep,
    dealer_id: Annotated[str | None, Query(alias="dealerId")] = None,
) -> OrderStatusCounts:
    return await service.status_counts(dealer_id=dealer_id)


@router.get("/{order_id}", response_model=Order, summary="Get order")
async def get_order(order_id: str, service: OrderServiceDep) -> Order:
    return await service.get_order(order_id)


@router.post(
    "",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
)
async def create_order(request: OrderCreate, service: OrderServiceDep) -> Order:
    try:
        return await service.create_order(request)
    except OrderServiceError as e:
        raise _order_http_error(e) from e


@router.patch("/{order_id}", response_model=Order, summary="Update order")
async def update_order(order_id: str, request: OrderUpdate, service: OrderServiceDep) -> Order:
    try:
        return await service.update_order(order_id, request)
    except OrderServiceError as e:
        raise _order_http_error(e) from e


@router.patch(
    "/{order_id}/details",
    response_model=Order,
    summary="Update the order checklist",
)
async def update_order_details(
    order_id: str, request: OrderDetailsUpdate, service: OrderServiceDep
) -> Order:
    return await service.update_details(order_id, request)


@router.post("/{order_id}/generate-odl", response_model=Order, summary="Generate ODL")
async def generate_odl(order_id: str, service: OrderServiceDep) -> Order:
    try:
        return await service.generate_odl(order_id)
    except OrderServiceError as e:
        raise _order_http_error(e) from e


@router.post("/{order_id}/deliver", response_model=Order, summary="Mark order as delivered")
async def deliver_order(order_id: str, service: OrderServiceDep) -> Order:
    try:
        return await service.mark_as_delivered(order_id)
    except OrderServiceError as e:
        raise _order_http_error(e) from e


@router.post("/{order_id}/cancel", response_model=Order, summary="Cancel order")
async def cancel_order(order_id: str, service: OrderServiceDep) -> Order:
    try:
        return await service.cancel_order(order_id)
    except OrderServiceError as e:
        raise _order_http_error(e) from e


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete order",
)
async def delete_order(order_id: str, service: OrderServiceDep) -> None:
    await service.delete_order(order_id)


@router.get(
    "/{order_id}/document",
    response_class=HTMLResponse,
    summary="Printable order",
)
async def order_document(order_id: str, documents: DocumentServiceDep) -> HTMLResponse:
    return HTMLResponse(content=await documents.render_order(order_id))
