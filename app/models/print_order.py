"""Print order model."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PrintOrder(Base):
    """A paid print order for a single shared photo.

    Rows are never deleted; they double as the audit trail of every
    checkout attempt.
    """

    __tablename__ = "print_orders"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    midtrans_order_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    fotoshare_token: Mapped[str] = mapped_column(String, nullable=False)
    size: Mapped[str] = mapped_column(String, nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="PENDING", index=True)  # PENDING / PAID / PRINTED / FAILED
    customer_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_email: Mapped[str | None] = mapped_column(String(254), nullable=True)

    # Snap checkout session metadata, outside the payment state machine
    snap_token: Mapped[str | None] = mapped_column(String, nullable=True)
    snap_redirect_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    snap_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
