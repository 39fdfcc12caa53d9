from django.urls import path
from .views import (
    ConfirmPaymentAPIView,
    CreatePaymentIntentAPIView,
    PaymentIntentDetailAPIView,
    PaymentWebhookAPIView,
)

urlpatterns = [
    path("payments/create-intent/", CreatePaymentIntentAPIView.as_view(), name="payment-create-intent"),
    path("payments/confirm/", ConfirmPaymentAPIView.as_view(), name="payment-confirm"),
    path("payments/webhook/", PaymentWebhookAPIView.as_view(), name="payment-webhook"),
    path("payments/<str:intent_id>/", PaymentIntentDetailAPIView.as_view(), name="payment-detail"),
]
