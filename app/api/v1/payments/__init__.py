"""Payments API."""
import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.core.dependencies import get_order_service, get_signature_verifier
from app.core.exceptions import StorageUnavailable, Unverified
from app.core.security import SignatureVerifier
from app.services.order_service import NotificationOutcome, OrderService

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_FIELDS = ("order_id", "status_code", "gross_amount", "signature_key")


def _field(payload: dict, name: str) -> str:
    value = payload.get(name)
    return "" if value is None else str(value)


@router.post("/webhook/midtrans")
async def midtrans_webhook(
    request: Request,
    verifier: SignatureVerifier = Depends(get_signature_verifier),
    service: OrderService = Depends(get_order_service),
):
    """
    Midtrans payment notification.

    Everything except a malformed payload or a storage failure is
    acknowledged with 200, including unknown orders and bad signatures,
    so Midtrans does not keep redelivering them.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse({"error": "bad_payload"}, status_code=status.HTTP_400_BAD_REQUEST)

    if not isinstance(payload, dict):
        return JSONResponse({"error": "bad_payload"}, status_code=status.HTTP_400_BAD_REQUEST)

    fields = {name: _field(payload, name) for name in REQUIRED_FIELDS}
    if not all(fields.values()):
        logger.warning(f"Midtrans notification missing fields: {[k for k, v in fields.items() if not v]}")
        return JSONResponse({"error": "bad_payload"}, status_code=status.HTTP_400_BAD_REQUEST)

    verified = verifier.verify(fields)

    try:
        result = await service.apply_notification(
            order_ref=fields["order_id"],
            transaction_status=_field(payload, "transaction_status"),
            fraud_status=_field(payload, "fraud_status"),
            verified=verified,
        )
    except Unverified:
        return {"ok": False, "error": "invalid_signature"}
    except StorageUnavailable:
        return JSONResponse({"error": "internal_error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = {"ok": True, "result": result.outcome.value}
    if result.outcome != NotificationOutcome.NOT_FOUND:
        response["status"] = result.order.status
    return response
