"""Print order persistence."""
import logging
import uuid
from contextlib import asynccontextmanager

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StorageUnavailable
from app.core.state_machine import OrderStatus, allowed_sources
from app.models.print_order import PrintOrder

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "paid_at": PrintOrder.paid_at,
    "created_at": PrintOrder.created_at,
}


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class OrderStore:
    """
    Row store for print orders.

    Every status change goes through ``transition``: a single
    ``UPDATE ... WHERE status IN (...)`` whose rowcount tells whether the
    precondition held. Database failures surface as ``StorageUnavailable``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Order store failure during {action}: {e}", exc_info=True)
            await self.db.rollback()
            raise StorageUnavailable(f"order store unavailable during {action}") from e

    async def insert(self, order: PrintOrder) -> PrintOrder:
        async with self._guard("insert"):
            self.db.add(order)
            await self.db.commit()
            await self.db.refresh(order)
        return order

    async def get(self, order_id: uuid.UUID) -> PrintOrder | None:
        stmt = (
            select(PrintOrder)
            .where(PrintOrder.id == order_id)
            .execution_options(populate_existing=True)
        )
        async with self._guard("get"):
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()

    async def get_by_ref(self, order_ref: str) -> PrintOrder | None:
        stmt = (
            select(PrintOrder)
            .where(PrintOrder.midtrans_order_id == order_ref)
            .execution_options(populate_existing=True)
        )
        async with self._guard("get_by_ref"):
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()

    async def record_session(self, order_id: uuid.UUID, snap_token: str, redirect_url: str) -> None:
        """Store Snap session metadata; status is left alone."""
        stmt = (
            update(PrintOrder)
            .where(PrintOrder.id == order_id)
            .values(snap_token=snap_token, snap_redirect_url=redirect_url)
            .execution_options(synchronize_session=False)
        )
        async with self._guard("record_session"):
            await self.db.execute(stmt)
            await self.db.commit()

    async def transition(
        self,
        target: OrderStatus,
        *,
        order_id: uuid.UUID | None = None,
        order_ref: str | None = None,
        values: dict | None = None,
    ) -> bool:
        """
        Move one order to ``target`` if its current status allows it.

        Self-transitions are never written. Orders with ``paid_at`` set are
        only ever moved to PRINTED. Returns True when a row changed.
        """
        if (order_id is None) == (order_ref is None):
            raise ValueError("exactly one of order_id or order_ref is required")
        values = dict(values or {})
        if "paid_at" in values and values["paid_at"] is None:
            raise ValueError("paid_at is never cleared")

        sources = allowed_sources(target) - {target}
        if not sources:
            return False

        stmt = update(PrintOrder).where(PrintOrder.status.in_(sorted(s.value for s in sources)))
        if order_id is not None:
            stmt = stmt.where(PrintOrder.id == order_id)
        else:
            stmt = stmt.where(PrintOrder.midtrans_order_id == order_ref)
        if target != OrderStatus.PRINTED:
            stmt = stmt.where(PrintOrder.paid_at.is_(None))
        stmt = stmt.values(status=target.value, **values).execution_options(synchronize_session=False)

        async with self._guard(f"transition to {target.value}"):
            result = await self.db.execute(stmt)
            await self.db.commit()
        return result.rowcount == 1

    async def list_orders(
        self,
        status: str | None = None,
        search: str | None = None,
        sort_field: str = "paid_at",
        ascending: bool = False,
        limit: int = 200,
    ) -> list[PrintOrder]:
        stmt = select(PrintOrder).execution_options(populate_existing=True)

        if status:
            stmt = stmt.where(PrintOrder.status == status)

        if search:
            pattern = f"%{escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    PrintOrder.fotoshare_token.ilike(pattern, escape="\\"),
                    PrintOrder.customer_name.ilike(pattern, escape="\\"),
                    PrintOrder.customer_email.ilike(pattern, escape="\\"),
                    PrintOrder.midtrans_order_id.ilike(pattern, escape="\\"),
                )
            )

        column = SORT_COLUMNS[sort_field]
        ordering = column.asc() if ascending else column.desc()
        stmt = stmt.order_by(ordering.nulls_last(), PrintOrder.created_at.desc()).limit(limit)

        async with self._guard("list_orders"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
