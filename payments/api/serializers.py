from rest_framework import serializers

from payments.models import PaymentIntent


class PaymentIntentSerializer(serializers.ModelSerializer):
    payment_status = serializers.CharField(source="order.payment_status", read_only=True)
    order_status = serializers.CharField(source="order.status", read_only=True)

    class Meta:
        model = PaymentIntent
        fields = [
            "id",
            "order",
            "amount",
            "currency",
            "status",
            "client_secret",
            "card_brand",
            "card_last4",
            "payment_status",
            "order_status",
            "created_at",
            "updated_at",
        ]


class CreateIntentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    currency = serializers.RegexField(r"^[A-Za-z]{3}$", default="usd")


class CardSerializer(serializers.Serializer):
    number = serializers.RegexField(r"^[\d ]{12,23}$")
    exp_month = serializers.IntegerField(min_value=1, max_value=12)
    exp_year = serializers.IntegerField(min_value=2000, max_value=2100)
    cvc = serializers.RegexField(r"^\d{3,4}$")


class PaymentMethodSerializer(serializers.Serializer):
    card = CardSerializer()


class ConfirmPaymentSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=64)
    payment_method = PaymentMethodSerializer()


class WebhookObjectSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)


class WebhookDataSerializer(serializers.Serializer):
    object = WebhookObjectSerializer()


class WebhookEventSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64, required=False)
    type = serializers.CharField(max_length=100)
    data = WebhookDataSerializer()
