"""Operator order views and print hand-off."""
import logging
import uuid
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from app.core.dependencies import get_current_admin, get_order_service, get_query_service
from app.core.exceptions import InvalidInput, NotFound, PreconditionFailed, StorageUnavailable
from app.models.print_order import PrintOrder
from app.services.order_service import OrderService
from app.services.query_service import DEFAULT_LIMIT, OrderFilter, OrderQueryService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


class OrderResponse(BaseModel):
    """Order as shown to the operator."""

    id: uuid.UUID
    midtrans_order_id: str
    fotoshare_token: str
    size: str
    qty: int
    amount: int
    status: str
    customer_name: str | None
    customer_email: str | None
    snap_error: str | None
    created_at: datetime
    paid_at: datetime | None

    @classmethod
    def from_order(cls, order: PrintOrder) -> "OrderResponse":
        return cls(
            id=order.id,
            midtrans_order_id=order.midtrans_order_id,
            fotoshare_token=order.fotoshare_token,
            size=order.size,
            qty=order.qty,
            amount=order.amount,
            status=order.status,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            snap_error=order.snap_error,
            created_at=order.created_at,
            paid_at=order.paid_at,
        )


class OrderListResponse(BaseModel):
    ok: bool
    orders: List[OrderResponse]


class MarkPrintedRequest(BaseModel):
    id: uuid.UUID


class MarkPrintedResponse(BaseModel):
    ok: bool
    order: OrderResponse


def _storage_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal_error")


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    status_filter: str = Query("ALL", alias="status"),
    needs_print: str = Query("0", alias="needsPrint"),
    q: str = "",
    sort_field: str = Query("paid_at", alias="sortField"),
    sort_dir: str = Query("desc", alias="sortDir"),
    limit: int = DEFAULT_LIMIT,
    service: OrderQueryService = Depends(get_query_service),
):
    """Filter, search and sort orders for the operator dashboard."""
    order_filter = OrderFilter(
        status=status_filter,
        paid_only=needs_print == "1",
        search=q,
        sort_field=sort_field,
        sort_dir=sort_dir,
        limit=limit,
    )
    try:
        orders = await service.list_orders(order_filter)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageUnavailable:
        raise _storage_error()
    return OrderListResponse(ok=True, orders=[OrderResponse.from_order(o) for o in orders])


@router.get("/paid-orders", response_model=OrderListResponse)
async def paid_orders(service: OrderQueryService = Depends(get_query_service)):
    """Print queue: latest paid orders not yet printed."""
    try:
        orders = await service.print_queue()
    except StorageUnavailable:
        raise _storage_error()
    return OrderListResponse(ok=True, orders=[OrderResponse.from_order(o) for o in orders])


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: uuid.UUID, service: OrderService = Depends(get_order_service)):
    try:
        order = await service.get_order(order_id)
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="order not found")
    except StorageUnavailable:
        raise _storage_error()
    return OrderResponse.from_order(order)


@router.post("/mark-printed", response_model=MarkPrintedResponse)
async def mark_printed(
    request: MarkPrintedRequest,
    service: OrderService = Depends(get_order_service),
):
    """Mark a PAID order as printed. Anything else is a 409 the operator can act on."""
    try:
        order = await service.mark_printed(request.id)
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="order not found")
    except PreconditionFailed as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "precondition_failed", "message": str(e), "status": e.current_status},
        )
    except StorageUnavailable:
        raise _storage_error()
    return MarkPrintedResponse(ok=True, order=OrderResponse.from_order(order))
