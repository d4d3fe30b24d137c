"""Operator-facing order queries."""
from dataclasses import dataclass

from app.core.exceptions import InvalidInput
from app.models.print_order import PrintOrder
from app.services.order_store import OrderStore

ALLOWED_STATUS = {"ALL", "PENDING", "PAID", "PRINTED", "FAILED"}
ALLOWED_SORT_FIELD = {"paid_at", "created_at"}
ALLOWED_SORT_DIR = {"asc", "desc"}

DEFAULT_LIMIT = 200
MAX_LIMIT = 500
PRINT_QUEUE_LIMIT = 50


@dataclass
class OrderFilter:
    status: str = "ALL"
    paid_only: bool = False
    search: str = ""
    sort_field: str = "paid_at"
    sort_dir: str = "desc"
    limit: int | None = DEFAULT_LIMIT


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return min(MAX_LIMIT, max(1, limit))


class OrderQueryService:
    """Read-only projections over print orders."""

    def __init__(self, store: OrderStore):
        self.store = store

    async def list_orders(self, order_filter: OrderFilter) -> list[PrintOrder]:
        """
        Filter, search and sort orders.

        ``paid_only`` wins over ``status``. Rows with an empty sort column
        come last in either direction.
        """
        status = (order_filter.status or "ALL").upper()
        sort_field = (order_filter.sort_field or "paid_at").lower()
        sort_dir = (order_filter.sort_dir or "desc").lower()

        if status not in ALLOWED_STATUS:
            raise InvalidInput("invalid status")
        if sort_field not in ALLOWED_SORT_FIELD:
            raise InvalidInput("invalid sortField")
        if sort_dir not in ALLOWED_SORT_DIR:
            raise InvalidInput("invalid sortDir")

        if order_filter.paid_only:
            status_filter = "PAID"
        elif status != "ALL":
            status_filter = status
        else:
            status_filter = None

        return await self.store.list_orders(
            status=status_filter,
            search=(order_filter.search or "").strip() or None,
            sort_field=sort_field,
            ascending=sort_dir == "asc",
            limit=clamp_limit(order_filter.limit),
        )

    async def print_queue(self) -> list[PrintOrder]:
        """Most recently paid orders still waiting to be printed."""
        return await self.list_orders(OrderFilter(paid_only=True, limit=PRINT_QUEUE_LIMIT))
