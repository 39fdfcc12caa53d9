import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission


class HasWebhookSecret(BasePermission):
    """Allows gateway callbacks that present the shared secret in X-Webhook-Secret."""

    message = "Invalid webhook secret."

    def has_permission(self, request, view):
        provided = request.headers.get("X-Webhook-Secret", "")
        expected = settings.PAYMENT_WEBHOOK_SECRET
        return bool(expected) and hmac.compare_digest(provided.encode(), expected.encode())
