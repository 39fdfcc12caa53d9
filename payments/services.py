"""Payment reconciliation.

Applies gateway outcomes to orders. Outcomes may arrive more than once (the
confirm call and the webhook, or webhook retries); an order whose payment is
already settled is left as it is.
"""

import logging
import secrets

from django.db import transaction
from django.utils import timezone

from common.exceptions import NotFound
from orders.models import Order
from orders.signals import emit_status_changed
from orders.transitions import OrderStatus, PaymentStatus
from .models import PaymentIntent

logger = logging.getLogger(__name__)

SETTLED_PAYMENT_STATUSES = frozenset({PaymentStatus.COMPLETED, PaymentStatus.REFUNDED})

EVENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_FAILED = "payment_intent.payment_failed"
HANDLED_EVENTS = {EVENT_SUCCEEDED: True, EVENT_FAILED: False}


def reconcile_payment(payment_intent_id: str, succeeded: bool) -> Order:
    """Record a payment outcome on the order carrying `payment_intent_id`.

    Success completes the payment and confirms a pending order; failure marks
    the payment failed. A completed payment is never downgraded and stock is
    never touched here.
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().filter(payment_intent_id=payment_intent_id).first()
        if order is None:
            raise NotFound(f"No order for payment intent {payment_intent_id}")

        if order.payment_status in SETTLED_PAYMENT_STATUSES:
            logger.info("Payment %s already settled for order %s, ignoring", payment_intent_id, order.pk)
            return order

        if not succeeded:
            order.payment_status = PaymentStatus.FAILED
            order.save(update_fields=["payment_status", "updated_at"])
            logger.warning("Payment %s failed for order %s", payment_intent_id, order.pk)
            return order

        order.payment_status = PaymentStatus.COMPLETED
        if order.status == OrderStatus.PENDING:
            previous = order.status
            order.transition(OrderStatus.CONFIRMED, None, "Payment confirmed")
            emit_status_changed(order, previous)
        elif order.status == OrderStatus.CANCELLED:
            # Money arrived for an order that no longer exists for the customer.
            order.payment_status = PaymentStatus.REFUNDED
            order.refund_amount = order.total_amount
            order.refund_reason = "Payment received after cancellation"
            order.save(update_fields=["payment_status", "refund_amount", "refund_reason", "updated_at"])
        else:
            order.save(update_fields=["payment_status", "updated_at"])

    logger.info("Payment %s completed for order %s (%s)", payment_intent_id, order.pk, order.payment_status)
    return order


def build_webhook_event(event_type: str, data: dict) -> dict:
    """Event envelope in the shape the mock gateway posts to the webhook."""
    return {
        "id": f"evt_mock_{secrets.token_hex(12)}",
        "type": event_type,
        "created": int(timezone.now().timestamp()),
        "data": {"object": data},
        "api_version": "2023-10-16",
        "livemode": False,
        "pending_webhooks": 1,
        "request": {"id": f"req_mock_{secrets.token_hex(12)}", "idempotency_key": None},
    }


def handle_webhook_event(event: dict):
    """Apply a gateway event. Returns the order, or None for event types we ignore."""
    event_type = event.get("type")
    if event_type not in HANDLED_EVENTS:
        logger.info("Ignoring webhook event %s of type %s", event.get("id"), event_type)
        return None

    succeeded = HANDLED_EVENTS[event_type]
    intent_id = event["data"]["object"]["id"]
    with transaction.atomic():
        PaymentIntent.objects.filter(pk=intent_id).exclude(status=PaymentIntent.Status.SUCCEEDED).update(
            status=PaymentIntent.Status.SUCCEEDED if succeeded else PaymentIntent.Status.FAILED,
            updated_at=timezone.now(),
        )
        return reconcile_payment(intent_id, succeeded)
