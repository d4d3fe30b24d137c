"""Midtrans transaction status -> order status."""
from app.core.state_machine import OrderStatus

PAID_TRANSACTION_STATUSES = frozenset({"settlement", "capture"})
FAILED_TRANSACTION_STATUSES = frozenset({"expire", "cancel", "deny"})


def map_transaction_status(transaction_status: str, fraud_status: str) -> OrderStatus:
    """
    Translate a Midtrans notification into an order status.

    Rules apply in order: paid (unless fraud denied), pending, failed.
    Anything unrecognised stays PENDING so an unknown string never settles
    or fails an order.
    """
    if transaction_status in PAID_TRANSACTION_STATUSES and fraud_status != "deny":
        return OrderStatus.PAID
    if transaction_status == "pending":
        return OrderStatus.PENDING
    if transaction_status in FAILED_TRANSACTION_STATUSES:
        return OrderStatus.FAILED
    return OrderStatus.PENDING
