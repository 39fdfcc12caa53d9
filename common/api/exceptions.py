"""Project-wide DRF exception handler.

Delegates to DRF's default handler and adds a machine readable `code` to
responses produced by storefront errors (e.g. `insufficient_stock`), plus the
current stock count where the error carries one.
"""

from rest_framework.views import exception_handler

from common.exceptions import InsufficientStock, StorefrontError


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None or not isinstance(exc, StorefrontError):
        return response

    response.data = {"detail": str(exc.detail), "code": exc.default_code}
    if isinstance(exc, InsufficientStock):
        response.data["available"] = exc.available
    return response
