"""Order status graph."""
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PRINTED = "PRINTED"
    FAILED = "FAILED"


# current status -> statuses it may move to (self-loops are idempotent re-assertions)
TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.FAILED}),
    OrderStatus.PAID: frozenset({OrderStatus.PAID, OrderStatus.PRINTED}),
    OrderStatus.PRINTED: frozenset(),
    OrderStatus.FAILED: frozenset({OrderStatus.FAILED}),
}


def allowed_sources(target: OrderStatus) -> frozenset[OrderStatus]:
    """Statuses from which ``target`` may be written."""
    return frozenset(source for source, targets in TRANSITIONS.items() if target in targets)
