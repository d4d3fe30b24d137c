"""Print order error taxonomy.

Services raise these; the API layer decides how each one is reported.
"""


class PrintOrderError(Exception):
    """Base class for print order errors."""


class InvalidInput(PrintOrderError, ValueError):
    """Kiosk or operator input rejected before any storage write."""


class Unverified(PrintOrderError):
    """Gateway notification failed signature verification."""


class NotFound(PrintOrderError):
    """Referenced order does not exist."""


class PreconditionFailed(PrintOrderError):
    """Order is not in a state that allows the requested transition."""

    def __init__(self, message: str, current_status: str | None = None):
        super().__init__(message)
        self.current_status = current_status


class GatewayUnavailable(PrintOrderError):
    """Checkout session could not be created.

    When raised by ``OrderService.create_order`` the order has already been
    moved to FAILED and ``order_id`` / ``order_ref`` identify it.
    """

    def __init__(self, detail: str, order_id=None, order_ref: str | None = None):
        super().__init__(detail)
        self.detail = detail
        self.order_id = order_id
        self.order_ref = order_ref


class StorageUnavailable(PrintOrderError):
    """Order store failed; distinct from a conditional update that did not match."""
