"""Print order lifecycle."""
import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from app.config import Settings
from app.core.exceptions import GatewayUnavailable, NotFound, PreconditionFailed, Unverified
from app.core.state_machine import OrderStatus
from app.models.print_order import PrintOrder
from app.services.midtrans_client import MidtransClient
from app.services.order_store import OrderStore
from app.services.status_mapper import map_transaction_status
from app.services.validation import (
    compute_amount,
    normalize_customer_email,
    normalize_customer_name,
    parse_photo_token,
    validate_quantity,
    validate_size,
)

logger = logging.getLogger(__name__)

ORDER_REF_MAX_LENGTH = 50


def generate_order_ref() -> str:
    """Midtrans order id: millisecond timestamp plus a random suffix."""
    return f"PRINT-{int(time.time() * 1000)}-{secrets.token_hex(4)}"[:ORDER_REF_MAX_LENGTH]


@dataclass(frozen=True)
class CheckoutResult:
    order_id: uuid.UUID
    order_ref: str
    amount: int
    snap_token: str
    redirect_url: str


class NotificationOutcome(str, Enum):
    APPLIED = "applied"  # status changed
    UNCHANGED = "unchanged"  # order already in the mapped status (redelivery)
    IGNORED = "ignored"  # state machine refused the change
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class NotificationResult:
    outcome: NotificationOutcome
    order_ref: str
    mapped_status: OrderStatus
    order: PrintOrder | None = None


class OrderService:
    """
    Creates print orders, applies verified Midtrans notifications and hands
    paid orders over to printing.

    Holds no state between calls. Concurrent callers are serialised only by
    the conditional updates in ``OrderStore.transition``.
    """

    def __init__(
        self,
        store: OrderStore,
        gateway: MidtransClient,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.gateway = gateway
        self.settings = settings
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def create_order(
        self,
        photo_input: str,
        size: str,
        qty: int,
        customer_name: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutResult:
        """
        Create a PENDING order and open a Snap session for it.

        The row is inserted before Midtrans is called, so every session
        attempt has an audit record. If the session cannot be created the
        order is moved to FAILED and ``GatewayUnavailable`` is raised.
        """
        unit_prices = self.settings.unit_prices
        token = parse_photo_token(photo_input, self.settings.photo_share_domain)
        qty = validate_quantity(qty, self.settings.max_quantity)
        size = validate_size(size, unit_prices)
        customer_name = normalize_customer_name(customer_name)
        customer_email = normalize_customer_email(customer_email)
        amount = compute_amount(size, qty, unit_prices)

        order = await self.store.insert(
            PrintOrder(
                midtrans_order_id=generate_order_ref(),
                fotoshare_token=token,
                size=size,
                qty=qty,
                amount=amount,
                status=OrderStatus.PENDING.value,
                customer_name=customer_name,
                customer_email=customer_email,
            )
        )
        logger.info(f"Print order {order.id} created: ref={order.midtrans_order_id}, amount={amount}")

        try:
            session = await self.gateway.create_session(
                order_ref=order.midtrans_order_id,
                amount=amount,
                unit_price=unit_prices[size],
                qty=qty,
                size=size,
                customer_name=customer_name,
                customer_email=customer_email,
            )
        except GatewayUnavailable as e:
            detail = e.detail[: self.settings.gateway_error_max_length]
            logger.warning(f"Snap session failed for {order.midtrans_order_id}: {detail}")
            await self.store.transition(
                OrderStatus.FAILED,
                order_id=order.id,
                values={"snap_error": detail},
            )
            raise GatewayUnavailable(detail, order_id=order.id, order_ref=order.midtrans_order_id) from e

        await self.store.record_session(order.id, session.token, session.redirect_url)

        return CheckoutResult(
            order_id=order.id,
            order_ref=order.midtrans_order_id,
            amount=amount,
            snap_token=session.token,
            redirect_url=session.redirect_url,
        )

    async def apply_notification(
        self,
        order_ref: str,
        transaction_status: str,
        fraud_status: str,
        verified: bool,
    ) -> NotificationResult:
        """
        Apply a Midtrans notification whose signature has already been checked.

        Safe under redelivery and reordering: PAID sets ``paid_at`` only while
        it is still empty, and nothing moves an order that has been paid
        anywhere except to PRINTED.
        """
        if not verified:
            logger.warning(f"Rejected unverified notification for ref={order_ref!r}")
            raise Unverified("invalid_signature")

        target = map_transaction_status(transaction_status, fraud_status)

        order = await self.store.get_by_ref(order_ref)
        if order is None:
            logger.warning(f"Notification for unknown order ref={order_ref!r} ({transaction_status})")
            return NotificationResult(NotificationOutcome.NOT_FOUND, order_ref, target)

        if target == OrderStatus.PAID:
            changed = await self.store.transition(target, order_ref=order_ref, values={"paid_at": self.clock()})
        else:
            changed = await self.store.transition(target, order_ref=order_ref)

        order = await self.store.get_by_ref(order_ref)
        if changed:
            outcome = NotificationOutcome.APPLIED
            logger.info(f"Order {order_ref} -> {target.value} ({transaction_status}/{fraud_status})")
        elif order.status == target.value or (target == OrderStatus.PAID and order.paid_at is not None):
            outcome = NotificationOutcome.UNCHANGED
            logger.info(f"Order {order_ref} already {order.status}, notification {transaction_status} is a no-op")
        else:
            outcome = NotificationOutcome.IGNORED
            logger.warning(
                f"Order {order_ref} is {order.status}; refusing {target.value} from notification {transaction_status}"
            )

        return NotificationResult(outcome, order_ref, target, order)

    async def mark_printed(self, order_id: uuid.UUID) -> PrintOrder:
        """
        Hand a PAID order over to printing.

        Exactly one of several concurrent calls for the same order succeeds;
        the rest get ``PreconditionFailed``.
        """
        if await self.store.transition(OrderStatus.PRINTED, order_id=order_id):
            logger.info(f"Order {order_id} marked PRINTED")
            return await self.store.get(order_id)

        order = await self.store.get(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")

        logger.info(f"Mark printed refused for {order_id}: status {order.status}")
        if order.status == OrderStatus.PRINTED.value:
            raise PreconditionFailed("Order has already been printed", current_status=order.status)
        raise PreconditionFailed(
            f"Order is {order.status}; only PAID orders can be printed",
            current_status=order.status,
        )

    async def get_order(self, order_id: uuid.UUID) -> PrintOrder:
        order = await self.store.get(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        return order
