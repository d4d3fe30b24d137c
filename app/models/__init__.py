"""Database models."""
from app.models.print_order import PrintOrder

__all__ = [
    "PrintOrder",
]
