"""Payments API views.

Customers open a payment intent for their order and confirm it with card
details; the mock gateway calls back through the webhook with the shared
secret. Payment outcomes reach the order only through
`payments.services.reconcile_payment`.
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import NotFound
from orders.api.permissions import IsOrderOwnerOrStaff
from orders.models import Order
from payments import gateway, services
from payments.models import PaymentIntent
from .permissions import HasWebhookSecret
from .serializers import (
    ConfirmPaymentSerializer,
    CreateIntentSerializer,
    PaymentIntentSerializer,
    WebhookEventSerializer,
)


def _intent_or_404(intent_id) -> PaymentIntent:
    intent = PaymentIntent.objects.select_related("order").filter(pk=intent_id).first()
    if intent is None:
        raise NotFound("Payment intent not found")
    return intent


class CreatePaymentIntentAPIView(APIView):
    """POST {order_id, currency?}: open (or reuse) the payment intent of an order."""

    permission_classes = [IsAuthenticated, IsOrderOwnerOrStaff]

    def post(self, request):
        serializer = CreateIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = Order.objects.filter(pk=serializer.validated_data["order_id"]).first()
        if order is None:
            raise NotFound("Order not found")
        self.check_object_permissions(request, order)

        reused = bool(order.payment_intent_id)
        intent = gateway.create_payment_intent(order, serializer.validated_data["currency"])
        data = PaymentIntentSerializer(_intent_or_404(intent.pk)).data
        return Response(data, status=status.HTTP_200_OK if reused else status.HTTP_201_CREATED)


class ConfirmPaymentAPIView(APIView):
    """POST {payment_intent_id, payment_method: {card}}: 200 when charged, 402 when declined."""

    permission_classes = [IsAuthenticated, IsOrderOwnerOrStaff]

    def post(self, request):
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        intent = _intent_or_404(serializer.validated_data["payment_intent_id"])
        self.check_object_permissions(request, intent.order)

        card = dict(serializer.validated_data["payment_method"]["card"])
        intent = gateway.confirm_payment(intent.pk, {"card": card})
        data = PaymentIntentSerializer(_intent_or_404(intent.pk)).data
        if intent.status == PaymentIntent.Status.SUCCEEDED:
            return Response(data, status=status.HTTP_200_OK)
        return Response(
            {
                "detail": gateway.DECLINE_ERROR["message"],
                "code": gateway.DECLINE_ERROR["code"],
                "error": gateway.DECLINE_ERROR,
                "payment": data,
            },
            status=status.HTTP_402_PAYMENT_REQUIRED,
        )


class PaymentIntentDetailAPIView(APIView):
    """GET a payment intent; only the order's customer or staff."""

    permission_classes = [IsAuthenticated, IsOrderOwnerOrStaff]

    def get(self, request, intent_id: str):
        intent = _intent_or_404(intent_id)
        self.check_object_permissions(request, intent.order)
        return Response(PaymentIntentSerializer(intent).data, status=status.HTTP_200_OK)


class PaymentWebhookAPIView(APIView):
    """Gateway callback for `payment_intent.succeeded` / `payment_intent.payment_failed`.

    Other event types are acknowledged and ignored.
    """

    authentication_classes = []
    permission_classes = [HasWebhookSecret]

    def post(self, request):
        serializer = WebhookEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.handle_webhook_event(serializer.validated_data)
        return Response({"received": True, "handled": order is not None}, status=status.HTTP_200_OK)
