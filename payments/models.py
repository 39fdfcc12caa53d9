"""Payments app models.

A PaymentIntent is one attempt to collect an order's total through the mock
gateway. Its id is what the order stores in `payment_intent_id` and what
gateway events refer to.
"""

import secrets

from django.core.validators import MinValueValidator
from django.db import models

from orders.models import Order


def new_intent_id() -> str:
    return f"pi_mock_{secrets.token_hex(12)}"


class PaymentIntent(models.Model):
    class Status(models.TextChoices):
        REQUIRES_PAYMENT_METHOD = "requires_payment_method", "requires_payment_method"
        SUCCEEDED = "succeeded", "succeeded"
        FAILED = "failed", "failed"

    id = models.CharField(primary_key=True, max_length=64, default=new_intent_id, editable=False)
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="payment_intents")
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default="usd")
    status = models.CharField(
        max_length=32, choices=Status.choices, default=Status.REQUIRES_PAYMENT_METHOD
    )
    client_secret = models.CharField(max_length=100)
    card_brand = models.CharField(max_length=20, blank=True, default="")
    card_last4 = models.CharField(max_length=4, blank=True, default="")
    decline_code = models.CharField(max_length=50, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "payment_intents"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.id} ({self.status}, {self.amount} {self.currency})"
