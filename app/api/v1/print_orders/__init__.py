"""Print orders API (kiosk)."""
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.core.dependencies import get_order_service
from app.core.exceptions import GatewayUnavailable, InvalidInput, StorageUnavailable
from app.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


class CreatePrintOrderRequest(BaseModel):
    """Kiosk checkout request."""

    fotoshare_input: str = ""  # token or https://fotoshare.co/i/<token>
    qty: int = 1
    size: str = "4x6"
    customer_name: str | None = None
    customer_email: str | None = None


class CreatePrintOrderResponse(BaseModel):
    ok: bool
    order_id: uuid.UUID
    midtrans_order_id: str
    amount: int
    snap_token: str
    redirect_url: str


@router.post("", response_model=CreatePrintOrderResponse)
async def create_print_order(
    request: CreatePrintOrderRequest,
    service: OrderService = Depends(get_order_service),
):
    """
    Create a print order and a Snap checkout session.

    A failed session leaves the order FAILED; the kiosk may simply retry,
    which creates a fresh order.
    """
    try:
        result = await service.create_order(
            photo_input=request.fotoshare_input,
            size=request.size,
            qty=request.qty,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
        )
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except GatewayUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error": "midtrans_error",
                "detail": e.detail,
                "order_id": str(e.order_id) if e.order_id else None,
                "retryable": True,
            },
        )
    except StorageUnavailable:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal_error")

    return CreatePrintOrderResponse(
        ok=True,
        order_id=result.order_id,
        midtrans_order_id=result.order_ref,
        amount=result.amount,
        snap_token=result.snap_token,
        redirect_url=result.redirect_url,
    )
