from unittest import mock

from django.test import TestCase, override_settings
from rest_framework.exceptions import ValidationError

from common.exceptions import NotFound, PaymentNotAllowed
from orders import services as order_services
from orders.models import Order
from orders.tests.helpers import create_drone, create_user, place_order
from orders.transitions import OrderStatus, PaymentStatus
from payments import gateway
from payments.models import PaymentIntent

VISA = {"number": "4242 4242 4242 4242", "exp_month": 12, "exp_year": 2030, "cvc": "123"}
MASTERCARD = {"number": "5555 5555 5555 4444", "exp_month": 1, "exp_year": 2031, "cvc": "321"}


class CreatePaymentIntentTests(TestCase):
    def setUp(self):
        self.cust, _ = create_user("cust")
        self.order = place_order(self.cust, create_drone(price="1299.00"), quantity=2)

    def test_intent_for_order_total(self):
        intent = gateway.create_payment_intent(self.order, currency="USD")
        self.order.refresh_from_db()
        self.assertTrue(intent.id.startswith("pi_mock_"))
        self.assertTrue(intent.client_secret.startswith(f"{intent.id}_secret_"))
        self.assertEqual(intent.amount, self.order.total_amount)
        self.assertEqual(intent.currency, "usd")
        self.assertEqual(intent.status, PaymentIntent.Status.REQUIRES_PAYMENT_METHOD)
        self.assertEqual(self.order.payment_intent_id, intent.id)

    def test_existing_intent_is_reused(self):
        first = gateway.create_payment_intent(self.order)
        second = gateway.create_payment_intent(self.order)
        self.assertEqual(first.id, second.id)
        self.assertEqual(PaymentIntent.objects.count(), 1)

    def test_paid_order_refused(self):
        Order.objects.filter(pk=self.order.pk).update(payment_status=PaymentStatus.COMPLETED)
        with self.assertRaises(PaymentNotAllowed):
            gateway.create_payment_intent(self.order)

    def test_cancelled_order_refused(self):
        order_services.cancel_order(self.order.id, self.cust)
        with self.assertRaises(PaymentNotAllowed):
            gateway.create_payment_intent(self.order)


class ConfirmPaymentTests(TestCase):
    def setUp(self):
        self.cust, _ = create_user("cust")
        self.order = place_order(self.cust, create_drone())
        self.intent = gateway.create_payment_intent(self.order)

    @override_settings(PAYMENT_SUCCESS_RATE=100)
    def test_approved_payment_confirms_order(self):
        intent = gateway.confirm_payment(self.intent.id, {"card": VISA})
        self.assertEqual(intent.status, PaymentIntent.Status.SUCCEEDED)
        self.assertEqual((intent.card_brand, intent.card_last4), ("visa", "4242"))
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(self.order.status, OrderStatus.CONFIRMED)

    @override_settings(PAYMENT_SUCCESS_RATE=0)
    def test_declined_payment_marks_failure(self):
        intent = gateway.confirm_payment(self.intent.id, {"card": VISA})
        self.assertEqual(intent.status, PaymentIntent.Status.FAILED)
        self.assertEqual(intent.decline_code, "generic_decline")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.FAILED)
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_declined_payment_can_be_retried(self):
        with override_settings(PAYMENT_SUCCESS_RATE=0):
            gateway.confirm_payment(self.intent.id, {"card": VISA})
        with override_settings(PAYMENT_SUCCESS_RATE=100):
            intent = gateway.confirm_payment(self.intent.id, {"card": VISA})
        self.assertEqual(intent.status, PaymentIntent.Status.SUCCEEDED)

    @override_settings(PAYMENT_SUCCESS_RATE=0)
    def test_succeeded_intent_is_not_charged_again(self):
        PaymentIntent.objects.filter(pk=self.intent.pk).update(status=PaymentIntent.Status.SUCCEEDED)
        intent = gateway.confirm_payment(self.intent.id, {"card": VISA})
        self.assertEqual(intent.status, PaymentIntent.Status.SUCCEEDED)

    def test_overlapping_decline_does_not_overwrite_success(self):
        decisions = []

        def decide():
            decisions.append(len(decisions))
            if len(decisions) == 1:
                # A second confirmation is charged while this one is still deciding.
                gateway.confirm_payment(self.intent.id, {"card": MASTERCARD})
                return False
            return True

        with mock.patch.object(gateway, "_approved", side_effect=decide):
            intent = gateway.confirm_payment(self.intent.id, {"card": VISA})

        self.assertEqual(len(decisions), 2)
        self.assertEqual(intent.status, PaymentIntent.Status.SUCCEEDED)
        stored = PaymentIntent.objects.get(pk=self.intent.pk)
        self.assertEqual((stored.status, stored.card_brand, stored.decline_code), ("succeeded", "mastercard", ""))
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.COMPLETED)

    def test_missing_card_details(self):
        for card in (None, {}, dict(VISA, cvc="")):
            with self.assertRaises(ValidationError):
                gateway.confirm_payment(self.intent.id, {"card": card})

    def test_unknown_intent(self):
        with self.assertRaises(NotFound):
            gateway.confirm_payment("pi_mock_missing", {"card": VISA})

    def test_card_brands(self):
        self.assertEqual(gateway.card_brand("4111"), "visa")
        self.assertEqual(gateway.card_brand("5555"), "mastercard")
        self.assertEqual(gateway.card_brand("3782"), "amex")
        self.assertEqual(gateway.card_brand("6011"), "discover")
        self.assertEqual(gateway.card_brand("9999"), "unknown")
