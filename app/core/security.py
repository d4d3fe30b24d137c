"""Security and authentication."""
import hashlib
import hmac
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

SIGNED_FIELDS = ("order_id", "status_code", "gross_amount")


def midtrans_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """SHA-512 hex digest Midtrans attaches to every notification as ``signature_key``."""
    raw = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


class SignatureVerifier:
    """Checks that a payment notification was signed with our server key."""

    def __init__(self, server_key: str):
        self.server_key = server_key

    def verify(self, notification: Mapping[str, Any]) -> bool:
        """
        Verify a raw notification payload.

        Missing, empty or non-string fields count as a failed verification.
        The digest comparison is constant time.
        """
        if not self.server_key or not isinstance(notification, Mapping):
            return False

        values = []
        for field in SIGNED_FIELDS:
            value = notification.get(field)
            if not isinstance(value, str) or not value:
                return False
            values.append(value)

        supplied = notification.get("signature_key")
        if not isinstance(supplied, str) or not supplied:
            return False

        expected = midtrans_signature(*values, self.server_key)
        try:
            return hmac.compare_digest(expected.encode("ascii"), supplied.encode("ascii"))
        except UnicodeEncodeError:
            return False


def verify_admin_password(supplied: str, expected: str) -> bool:
    """Constant-time operator password check; an unset password never matches."""
    if not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def create_access_token(
    data: dict[str, Any],
    secret_key: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=12)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm="HS256")


def decode_access_token(token: str, secret_key: str) -> dict[str, Any] | None:
    """Decode a JWT, returning None when it is invalid or expired."""
    try:
        return jwt.decode(token, secret_key, algorithms=["HS256"])
    except jwt.JWTError:
        return None
