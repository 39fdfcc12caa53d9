"""Mock payment gateway.

Simulates a card processor: intents are created for an order's total and
confirmed with card details. Whether a confirmation succeeds is decided by
`settings.PAYMENT_SUCCESS_RATE` (percent); no money moves anywhere.
"""

import logging
import random
import secrets

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from common.exceptions import NotFound, PaymentNotAllowed
from orders.models import Order
from orders.transitions import OrderStatus, PaymentStatus
from .models import PaymentIntent
from .services import reconcile_payment

logger = logging.getLogger(__name__)

CARD_BRANDS = {"4": "visa", "5": "mastercard", "3": "amex", "6": "discover"}
REQUIRED_CARD_FIELDS = ("number", "exp_month", "exp_year", "cvc")

DECLINE_ERROR = {
    "type": "card_error",
    "code": "card_declined",
    "message": "Your card was declined. (This is a mock error for demonstration)",
    "decline_code": "generic_decline",
}


def card_brand(number: str) -> str:
    return CARD_BRANDS.get(number[:1], "unknown")


def _card_number(card) -> str:
    if not isinstance(card, dict) or any(not card.get(field) for field in REQUIRED_CARD_FIELDS):
        raise ValidationError({"card": "Missing card details"})
    return str(card["number"]).replace(" ", "")


def _approved() -> bool:
    return random.random() * 100 < settings.PAYMENT_SUCCESS_RATE


def create_payment_intent(order: Order, currency: str = "usd") -> PaymentIntent:
    """Open a payment intent for the order's total, or return the one it already has."""
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        if order.payment_status in (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED):
            raise PaymentNotAllowed("Order is already paid.")
        if order.status == OrderStatus.CANCELLED:
            raise PaymentNotAllowed("Cancelled orders cannot be paid.")

        if order.payment_intent_id:
            return PaymentIntent.objects.get(pk=order.payment_intent_id)

        intent = PaymentIntent(order=order, amount=order.total_amount, currency=currency.lower())
        intent.client_secret = f"{intent.id}_secret_{secrets.token_hex(12)}"
        intent.save(force_insert=True)
        Order.objects.filter(pk=order.pk, payment_intent_id__isnull=True).update(payment_intent_id=intent.id)

    logger.info("Created payment intent %s for order %s (%s %s)", intent.id, order.pk, intent.amount, intent.currency)
    return intent


def confirm_payment(intent_id: str, payment_method: dict) -> PaymentIntent:
    """Charge the card in `payment_method["card"]` against the intent.

    The outcome is recorded on the intent and reconciled onto the order. An
    intent that already succeeded is returned as is; a failed one may be
    retried.
    """
    number = _card_number((payment_method or {}).get("card"))
    intent = PaymentIntent.objects.select_related("order").filter(pk=intent_id).first()
    if intent is None:
        raise NotFound("Payment intent not found")
    if intent.status == PaymentIntent.Status.SUCCEEDED:
        return intent
    if intent.order.status == OrderStatus.CANCELLED:
        raise PaymentNotAllowed("Cancelled orders cannot be paid.")

    succeeded = _approved()
    with transaction.atomic():
        # A concurrent confirmation may have charged the intent meanwhile.
        intent = PaymentIntent.objects.select_for_update().get(pk=intent_id)
        if intent.status == PaymentIntent.Status.SUCCEEDED:
            return intent
        intent.status = PaymentIntent.Status.SUCCEEDED if succeeded else PaymentIntent.Status.FAILED
        intent.card_brand = card_brand(number)
        intent.card_last4 = number[-4:]
        intent.decline_code = "" if succeeded else DECLINE_ERROR["decline_code"]
        intent.save()
        reconcile_payment(intent.id, succeeded)

    if succeeded:
        logger.info("Payment intent %s succeeded (%s ****%s)", intent.id, intent.card_brand, intent.card_last4)
    else:
        logger.warning("Payment intent %s declined (%s ****%s)", intent.id, intent.card_brand, intent.card_last4)
    return intent
