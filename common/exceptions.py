"""Domain errors shared by the drones, orders and payments apps.

All errors are DRF `APIException` subclasses, so views do not need to map
them by hand: the project exception handler turns them into
`{"detail": ..., "code": ...}` responses with the status codes below.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class StorefrontError(APIException):
    """Base class for errors raised by the order/stock core."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The request could not be processed."
    default_code = "storefront_error"


class NotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class Unavailable(StorefrontError):
    default_detail = "Drone is not available for purchase."
    default_code = "unavailable"


class InsufficientStock(StorefrontError):
    """Requested quantity exceeds the units left; `available` holds the count."""

    default_detail = "Insufficient stock."
    default_code = "insufficient_stock"

    def __init__(self, available: int, requested: int = None):
        self.available = available
        self.requested = requested
        super().__init__(f"Only {available} units available")


class InvalidTransition(StorefrontError):
    default_code = "invalid_transition"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current} to {requested}")


class NotCancellable(StorefrontError):
    default_detail = "Order can no longer be cancelled."
    default_code = "not_cancellable"


class InconsistentPaymentState(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Cannot deliver order without completed payment"
    default_code = "inconsistent_payment_state"


class PaymentNotAllowed(StorefrontError):
    default_detail = "This order cannot be paid."
    default_code = "payment_not_allowed"
