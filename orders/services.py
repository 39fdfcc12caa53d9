"""Order services.

Creation, status transitions and cancellation. Each operation runs in a single
transaction: stock reservation and release go through `drones.stock`, existing
orders are locked with `select_for_update()` before they change, and any error
rolls everything back.
"""

import logging

from django.db import transaction
from rest_framework.exceptions import ValidationError

from common.exceptions import InvalidTransition, NotCancellable, NotFound
from drones import stock
from .models import MAX_ORDER_QUANTITY, Order
from .signals import emit_status_changed
from .transitions import OrderStatus, PaymentStatus, can_transition

logger = logging.getLogger(__name__)

__all__ = ["create_order", "transition_status", "cancel_order", "emit_status_changed"]


def _locked_order(order_id) -> Order:
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found")
    return order


def _restore_stock(order: Order) -> None:
    """Put the order's units back, at most once per order."""
    claimed = Order.objects.filter(pk=order.pk, stock_restored=False).update(stock_restored=True)
    if not claimed:
        return
    stock.release_stock(order.drone_id, order.quantity)
    order.stock_restored = True


def create_order(user, drone_id, quantity, shipping_address, customer_info, notes="", payment_method=None) -> Order:
    """Reserve stock and create a pending order for `user`.

    The conditional stock decrement is what decides between competing
    requests for the last units: the loser gets InsufficientStock and no
    order row is written.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= MAX_ORDER_QUANTITY:
        raise ValidationError({"quantity": f"Quantity must be between 1 and {MAX_ORDER_QUANTITY}."})

    with transaction.atomic():
        drone = stock.reserve_stock(drone_id, quantity)
        order = Order.objects.create(
            user=user,
            drone=drone,
            quantity=quantity,
            total_amount=drone.price * quantity,
            shipping_address=shipping_address,
            customer_info=customer_info,
            notes=notes or "",
            payment_method=payment_method or Order.PaymentMethod.MOCK_PAYMENT,
        )
        order.status_history.create(status=OrderStatus.PENDING, updated_by=user, notes="Order created")
        emit_status_changed(order, None)

    logger.info("Order %s created by user %s: %s x drone %s = %s", order.pk, user.pk, quantity, drone.pk, order.total_amount)
    return order


def transition_status(order_id, new_status, actor=None, notes="") -> Order:
    """Move an order to `new_status` (admin path).

    Cancellation is routed through `cancel_order` so the reserved stock comes
    back with it.
    """
    if new_status == OrderStatus.CANCELLED:
        return cancel_order(order_id, actor, notes=notes, force=True)

    with transaction.atomic():
        order = _locked_order(order_id)
        previous = order.status
        order.transition(new_status, actor, notes)
        emit_status_changed(order, previous)

    logger.info("Order %s moved %s -> %s", order.pk, previous, order.status)
    return order


def cancel_order(order_id, actor=None, notes="", force=False) -> Order:
    """Cancel an order and return its units to stock.

    Without `force` (customer request) the order must still be cancellable,
    otherwise NotCancellable is raised. With `force` (admin) any order the
    transition table allows may be cancelled; a completed payment is then
    marked refunded for the full amount. Cancelling a cancelled order
    returns it unchanged.
    """
    with transaction.atomic():
        order = _locked_order(order_id)
        if order.status == OrderStatus.CANCELLED:
            return order

        if not force and not order.can_be_cancelled():
            raise NotCancellable()
        if not can_transition(order.status, OrderStatus.CANCELLED):
            raise InvalidTransition(order.status, OrderStatus.CANCELLED)

        previous = order.status
        if force and order.payment_status == PaymentStatus.COMPLETED:
            order.payment_status = PaymentStatus.REFUNDED
            order.refund_amount = order.total_amount
            order.refund_reason = notes or "Cancelled by administrator"

        order.transition(OrderStatus.CANCELLED, actor, notes or "Order cancelled")
        _restore_stock(order)
        emit_status_changed(order, previous)

    logger.info("Order %s cancelled (was %s, force=%s)", order.pk, previous, force)
    return order
