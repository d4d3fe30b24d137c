"""Midtrans Snap client."""
import base64
import logging
from dataclasses import dataclass

import httpx

from app.config import Settings
from app.core.exceptions import GatewayUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    """Snap session issued for a single payment attempt."""

    token: str
    redirect_url: str


class MidtransClient:
    """Creates Snap checkout sessions."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        self.server_key = settings.midtrans_server_key
        self.snap_url = settings.midtrans_snap_url
        self.enabled_payments = list(settings.midtrans_enabled_payments)
        self.timeout = settings.midtrans_timeout_seconds
        self._http_client = http_client

    def _auth_header(self) -> str:
        # Midtrans uses Basic auth with the server key as username and an empty password
        auth_bytes = base64.b64encode(f"{self.server_key}:".encode()).decode()
        return f"Basic {auth_bytes}"

    def build_payload(
        self,
        order_ref: str,
        amount: int,
        unit_price: int,
        qty: int,
        size: str,
        customer_name: str | None = None,
        customer_email: str | None = None,
    ) -> dict:
        payload = {
            "transaction_details": {"order_id": order_ref, "gross_amount": amount},
            "enabled_payments": self.enabled_payments,
            "item_details": [
                {
                    "id": f"print-{size}",
                    "price": unit_price,
                    "quantity": qty,
                    "name": f"Photo Print {size}",
                },
            ],
        }
        customer_details = {}
        if customer_name:
            customer_details["first_name"] = customer_name
        if customer_email:
            customer_details["email"] = customer_email
        if customer_details:
            payload["customer_details"] = customer_details
        return payload

    async def create_session(
        self,
        order_ref: str,
        amount: int,
        unit_price: int,
        qty: int,
        size: str,
        customer_name: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        """
        Create a Snap transaction for ``order_ref``.

        Raises:
            GatewayUnavailable: server key missing, transport error, non-2xx
                response or a response without token/redirect_url.
        """
        if not self.server_key:
            raise GatewayUnavailable("Midtrans server key not configured")

        payload = self.build_payload(order_ref, amount, unit_price, qty, size, customer_name, customer_email)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": self._auth_header(),
        }

        logger.info(f"Creating Snap session for {order_ref}: amount={amount}")
        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.snap_url, json=payload, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.snap_url, json=payload, headers=headers)
        except httpx.TimeoutException:
            raise GatewayUnavailable("Midtrans API timeout")
        except httpx.HTTPError as e:
            raise GatewayUnavailable(f"Midtrans API request failed: {e}")

        if not response.is_success:
            raise GatewayUnavailable(response.text or f"HTTP {response.status_code}")

        try:
            snap = response.json()
        except ValueError:
            raise GatewayUnavailable(f"Midtrans returned invalid JSON: {response.text}")

        token = snap.get("token") if isinstance(snap, dict) else None
        redirect_url = snap.get("redirect_url") if isinstance(snap, dict) else None
        if not token or not redirect_url:
            raise GatewayUnavailable(f"Midtrans response missing token or redirect_url: {response.text}")

        return CheckoutSession(token=token, redirect_url=redirect_url)
