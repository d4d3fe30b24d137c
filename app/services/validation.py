"""Kiosk input validation and pricing."""
import re
from urllib.parse import urlsplit

from app.core.exceptions import InvalidInput

TOKEN_RE = re.compile(r"^[a-zA-Z0-9]+$")
SHARE_PATH_RE = re.compile(r"^/i/([a-zA-Z0-9]+)$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 254


def parse_photo_token(photo_input: str, share_domain: str) -> str:
    """
    Extract the photo token from a bare token or a share-service URL.

    Accepts ``abc123`` or ``https://<share_domain>/i/abc123``.
    """
    s = (photo_input or "").strip()
    if not s:
        raise InvalidInput("fotoshare_input required")

    if "://" not in s:
        if not TOKEN_RE.match(s):
            raise InvalidInput("Invalid token")
        return s

    try:
        url = urlsplit(s)
        hostname = url.hostname
    except ValueError:
        raise InvalidInput("Invalid fotoshare URL")

    if url.scheme not in ("http", "https"):
        raise InvalidInput("Invalid fotoshare URL")
    if hostname != share_domain:
        raise InvalidInput(f"Only {share_domain} allowed")

    m = SHARE_PATH_RE.match(url.path)
    if not m:
        raise InvalidInput("Invalid fotoshare URL")
    return m.group(1)


def validate_quantity(qty, max_quantity: int) -> int:
    # bool is an int subclass; True must not pass as 1
    if isinstance(qty, bool) or not isinstance(qty, int):
        raise InvalidInput(f"qty must be 1..{max_quantity}")
    if qty < 1 or qty > max_quantity:
        raise InvalidInput(f"qty must be 1..{max_quantity}")
    return qty


def validate_size(size: str, unit_prices: dict[str, int]) -> str:
    if size not in unit_prices:
        raise InvalidInput("invalid size")
    return size


def normalize_customer_name(name: str | None) -> str | None:
    if name is None:
        return None
    name = name.strip()
    if not name:
        return None
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidInput(f"customer_name must be at most {MAX_NAME_LENGTH} characters")
    return name


def normalize_customer_email(email: str | None) -> str | None:
    if email is None:
        return None
    email = email.strip()
    if not email:
        return None
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_RE.match(email):
        raise InvalidInput("invalid email")
    return email


def compute_amount(size: str, qty: int, unit_prices: dict[str, int]) -> int:
    """Order total: unit price of the size times quantity."""
    return unit_prices[size] * qty
