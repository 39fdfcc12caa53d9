"""Orders app models.

Defines the Order model and its append-only status history. An Order reserves
`quantity` units of a Drone when it is created and snapshots the total amount
at that moment. Status changes go through `Order.transition`, which enforces
the table in `orders.transitions`; orders are never deleted, cancellation is a
terminal status.
"""

import secrets

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models, transaction
from django.utils import timezone

from common.exceptions import InconsistentPaymentState, InvalidTransition
from drones.models import Drone
from .transitions import (
    CANCELLABLE_STATUSES,
    REFUNDABLE_STATUSES,
    OrderStatus,
    PaymentStatus,
    can_transition,
    estimated_delivery_for,
)

MAX_ORDER_QUANTITY = 10


def new_tracking_number() -> str:
    return f"ARW{secrets.token_hex(6).upper()}"


class Order(models.Model):
    """A customer's order for one drone model."""

    Status = OrderStatus
    PaymentStatus = PaymentStatus

    class PaymentMethod(models.TextChoices):
        CREDIT_CARD = "credit_card", "credit_card"
        DEBIT_CARD = "debit_card", "debit_card"
        PAYPAL = "paypal", "paypal"
        MOCK_PAYMENT = "mock_payment", "mock_payment"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    drone = models.ForeignKey(
        Drone,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    quantity = models.PositiveSmallIntegerField(
        default=1, validators=[MinValueValidator(1), MaxValueValidator(MAX_ORDER_QUANTITY)]
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(0)]
    )

    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    payment_intent_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.MOCK_PAYMENT
    )

    shipping_address = models.JSONField(default=dict)
    customer_info = models.JSONField(default=dict)

    order_date = models.DateTimeField(default=timezone.now)
    estimated_delivery = models.DateTimeField(null=True, blank=True)
    actual_delivery = models.DateTimeField(null=True, blank=True)
    tracking_number = models.CharField(
        max_length=20,
        blank=True,
        default="",
        validators=[RegexValidator(r"^[A-Z0-9]{8,20}$", "Tracking number must be 8-20 alphanumeric characters")],
    )
    notes = models.TextField(max_length=1000, blank=True, default="")

    # Set once the reserved units went back to the drone after cancellation.
    stock_restored = models.BooleanField(default=False)
    refund_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    refund_reason = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-order_date", "-id"]
        indexes = [
            models.Index(fields=["user", "status"], name="orders_user_status_idx"),
            models.Index(fields=["status", "order_date"], name="orders_status_date_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
        ]

    def __str__(self) -> str:
        """Readable representation for admin and debugging."""
        return f"Order<{self.id} {self.drone_id}x{self.quantity} {self.status}/{self.payment_status}>"

    # ------------------------------ derived state ------------------------------

    @property
    def customer_full_name(self) -> str:
        info = self.customer_info or {}
        return f"{info.get('firstName', '')} {info.get('lastName', '')}".strip()

    @property
    def delivery_status(self) -> str:
        if self.actual_delivery:
            return "delivered"
        if self.status == OrderStatus.SHIPPED and self.estimated_delivery:
            return "overdue" if timezone.now() > self.estimated_delivery else "in_transit"
        return "not_shipped"

    def can_be_cancelled(self) -> bool:
        """Customer-initiated cancellation: early statuses and not yet paid."""
        return self.status in CANCELLABLE_STATUSES and self.payment_status != PaymentStatus.COMPLETED

    def can_be_refunded(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED and self.status in REFUNDABLE_STATUSES

    def clean(self):
        super().clean()
        errors = {}
        if self.estimated_delivery and self.estimated_delivery <= self.order_date:
            errors["estimated_delivery"] = "Estimated delivery date must be after order date"
        if self.actual_delivery and self.actual_delivery < self.order_date:
            errors["actual_delivery"] = "Actual delivery date must be after order date"
        if self.refund_amount is not None and self.refund_amount > self.total_amount:
            errors["refund_amount"] = "Refund amount cannot exceed total amount"
        if errors:
            raise ValidationError(errors)

    # --------------------------- status transitions ----------------------------

    def transition(self, new_status: str, actor=None, notes: str = ""):
        """Move the order to `new_status`, recording who did it and why.

        Raises InvalidTransition for moves outside the transition table and
        InconsistentPaymentState when delivering an unpaid order; in both cases
        nothing is changed. Cancelling only flips the status, returning the
        reserved stock is up to the caller (see `orders.services.cancel_order`).
        """
        if not can_transition(self.status, new_status):
            raise InvalidTransition(self.status, new_status)
        if new_status == OrderStatus.DELIVERED and self.payment_status != PaymentStatus.COMPLETED:
            raise InconsistentPaymentState()

        now = timezone.now()
        with transaction.atomic():
            self.status_history.create(status=new_status, timestamp=now, updated_by=actor, notes=notes or "")
            self.status = new_status
            if new_status == OrderStatus.CONFIRMED and self.estimated_delivery is None:
                self.estimated_delivery = estimated_delivery_for(self.order_date)
            if new_status == OrderStatus.SHIPPED and not self.tracking_number:
                self.tracking_number = new_tracking_number()
            if new_status == OrderStatus.DELIVERED:
                self.actual_delivery = now
            self.save()
        return self


class OrderStatusChange(models.Model):
    """One entry of an order's status history. Rows are only ever inserted."""

    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="status_history")
    status = models.CharField(max_length=20, choices=OrderStatus.choices)
    timestamp = models.DateTimeField(default=timezone.now)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    notes = models.CharField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"OrderStatusChange<{self.order_id} {self.status} @ {self.timestamp:%Y-%m-%d %H:%M}>"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Status history entries are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Status history entries are append-only.")
