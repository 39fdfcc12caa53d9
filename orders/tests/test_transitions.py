from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from common.exceptions import InconsistentPaymentState, InvalidTransition
from orders.models import Order
from orders.transitions import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, OrderStatus, PaymentStatus

from .helpers import create_drone, create_user, customer_info, place_order, shipping_address


def order_in(user, drone, status, payment_status=PaymentStatus.COMPLETED):
    return Order.objects.create(
        user=user,
        drone=drone,
        quantity=1,
        total_amount=drone.price,
        status=status,
        payment_status=payment_status,
        shipping_address=shipping_address(),
        customer_info=customer_info(),
    )


class TransitionTableTests(TestCase):
    def setUp(self):
        self.admin, _ = create_user("admin", is_staff=True)
        self.cust, _ = create_user("cust")
        self.drone = create_drone(stock_quantity=0, in_stock=False)

    def test_every_pair_follows_the_table(self):
        for current in OrderStatus.values:
            for requested in OrderStatus.values:
                with self.subTest(current=current, requested=requested):
                    order = order_in(self.cust, self.drone, current)
                    if requested in ALLOWED_TRANSITIONS[current]:
                        order.transition(requested, self.admin)
                        order.refresh_from_db()
                        self.assertEqual(order.status, requested)
                        self.assertEqual(order.status_history.count(), 1)
                    else:
                        with self.assertRaises(InvalidTransition):
                            order.transition(requested, self.admin)
                        order.refresh_from_db()
                        self.assertEqual(order.status, current)
                        self.assertEqual(order.status_history.count(), 0)

    def test_terminal_statuses(self):
        self.assertEqual(TERMINAL_STATUSES, {OrderStatus.DELIVERED, OrderStatus.CANCELLED})

    def test_error_names_both_states(self):
        order = order_in(self.cust, self.drone, OrderStatus.PENDING)
        with self.assertRaises(InvalidTransition) as ctx:
            order.transition(OrderStatus.SHIPPED, self.admin)
        self.assertEqual(str(ctx.exception.detail), "Cannot transition from pending to shipped")

    def test_unknown_status_is_invalid(self):
        order = order_in(self.cust, self.drone, OrderStatus.PENDING)
        with self.assertRaises(InvalidTransition):
            order.transition("lost", self.admin)


class TransitionEffectsTests(TestCase):
    def setUp(self):
        self.admin, _ = create_user("admin", is_staff=True)
        self.cust, _ = create_user("cust")
        self.drone = create_drone(stock_quantity=10, price="1299.00")

    def test_confirm_sets_estimated_delivery(self):
        order = place_order(self.cust, self.drone, quantity=2)
        order.transition(OrderStatus.CONFIRMED, self.admin, "Checked")
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.CONFIRMED)
        self.assertEqual(order.estimated_delivery, order.order_date + timedelta(days=5))
        last = order.status_history.last()
        self.assertEqual((last.status, last.updated_by, last.notes), ("confirmed", self.admin, "Checked"))

    def test_deliver_without_payment_is_rejected(self):
        order = order_in(self.cust, self.drone, OrderStatus.SHIPPED, payment_status=PaymentStatus.PENDING)
        with self.assertRaises(InconsistentPaymentState):
            order.transition(OrderStatus.DELIVERED, self.admin)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.SHIPPED)
        self.assertIsNone(order.actual_delivery)
        self.assertEqual(order.status_history.count(), 0)

    def test_deliver_paid_order_sets_actual_delivery(self):
        order = order_in(self.cust, self.drone, OrderStatus.SHIPPED)
        order.transition(OrderStatus.DELIVERED, self.admin)
        order.refresh_from_db()
        self.assertIsNotNone(order.actual_delivery)
        self.assertEqual(order.delivery_status, "delivered")

    def test_ship_assigns_tracking_number_once(self):
        order = order_in(self.cust, self.drone, OrderStatus.PROCESSING)
        order.transition(OrderStatus.SHIPPED, self.admin)
        order.refresh_from_db()
        self.assertRegex(order.tracking_number, r"^ARW[0-9A-F]{12}$")
        shipped_with = order.tracking_number
        order.transition(OrderStatus.DELIVERED, self.admin)
        order.refresh_from_db()
        self.assertEqual(order.tracking_number, shipped_with)

    def test_cancel_only_flips_status(self):
        order = place_order(self.cust, self.drone)
        order.transition(OrderStatus.CANCELLED, self.admin)
        self.drone.refresh_from_db()
        self.assertEqual(self.drone.stock_quantity, 9)
        self.assertFalse(order.stock_restored)


class OrderRecordTests(TestCase):
    def setUp(self):
        self.cust, _ = create_user("cust")
        self.drone = create_drone()

    def test_history_starts_with_creation_and_is_append_only(self):
        order = place_order(self.cust, self.drone)
        entry = order.status_history.get()
        self.assertEqual((entry.status, entry.updated_by, entry.notes), ("pending", self.cust, "Order created"))
        entry.notes = "rewritten"
        with self.assertRaises(ValueError):
            entry.save()
        with self.assertRaises(ValueError):
            entry.delete()
        self.assertEqual(order.status_history.get().notes, "Order created")

    def test_cancellable_and_refundable(self):
        order = order_in(self.cust, self.drone, OrderStatus.CONFIRMED, payment_status=PaymentStatus.PENDING)
        self.assertTrue(order.can_be_cancelled())
        self.assertFalse(order.can_be_refunded())
        order.payment_status = PaymentStatus.COMPLETED
        self.assertFalse(order.can_be_cancelled())
        self.assertTrue(order.can_be_refunded())
        order.status = OrderStatus.DELIVERED
        self.assertFalse(order.can_be_refunded())

    def test_customer_full_name(self):
        order = place_order(self.cust, self.drone)
        self.assertEqual(order.customer_full_name, "Ada Lovelace")

    def test_delivery_status(self):
        order = order_in(self.cust, self.drone, OrderStatus.SHIPPED)
        self.assertEqual(order.delivery_status, "not_shipped")
        order.estimated_delivery = timezone.now() + timedelta(days=1)
        self.assertEqual(order.delivery_status, "in_transit")
        order.estimated_delivery = timezone.now() - timedelta(days=1)
        self.assertEqual(order.delivery_status, "overdue")

    def test_clean_validates_dates_and_refund(self):
        order = order_in(self.cust, self.drone, OrderStatus.CONFIRMED)
        order.refresh_from_db()
        order.estimated_delivery = order.order_date - timedelta(days=1)
        order.refund_amount = order.total_amount + Decimal("1.00")
        with self.assertRaises(ValidationError) as ctx:
            order.full_clean()
        self.assertIn("estimated_delivery", ctx.exception.message_dict)
        self.assertIn("refund_amount", ctx.exception.message_dict)
