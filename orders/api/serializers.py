"""Orders API serializers.

Input serializers for creating orders, patching status and cancelling; an
output serializer with the full order representation including its status
history. Shipping address and customer info are stored as JSON and validated
here, with camelCase keys as the storefront client sends them.
"""

from rest_framework import serializers

from orders import services
from orders.models import MAX_ORDER_QUANTITY, Order, OrderStatusChange
from orders.transitions import OrderStatus

ZIP_CODE_RE = r"^\d{5}(-\d{4})?$"
PHONE_RE = r"^\+?[\d\s\-\(\)]{10,}$"


class ShippingAddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=200)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zipCode = serializers.RegexField(
        ZIP_CODE_RE,
        error_messages={"invalid": "Please enter a valid ZIP code (e.g., 12345 or 12345-6789)"},
    )
    country = serializers.CharField(max_length=100, default="United States")


class CustomerInfoSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=50)
    lastName = serializers.CharField(max_length=50)
    email = serializers.EmailField()
    phone = serializers.RegexField(PHONE_RE, error_messages={"invalid": "Please enter a valid phone number"})

    def validate_email(self, value):
        return value.lower()


class OrderCreateSerializer(serializers.Serializer):
    """Input serializer for POST /api/orders/.

    Field validation happens here; stock checks and the reservation happen
    in `orders.services.create_order`, whose domain errors pass through.
    """

    drone_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_ORDER_QUANTITY, default=1)
    shipping_address = ShippingAddressSerializer()
    customer_info = CustomerInfoSerializer()
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")

    def create(self, validated_data):
        request = self.context["request"]
        return services.create_order(
            user=request.user,
            drone_id=validated_data["drone_id"],
            quantity=validated_data["quantity"],
            shipping_address=dict(validated_data["shipping_address"]),
            customer_info=dict(validated_data["customer_info"]),
            notes=validated_data.get("notes", ""),
            payment_method=validated_data.get("payment_method"),
        )


class OrderStatusChangeSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusChange
        fields = ["status", "timestamp", "updated_by", "notes"]


class OrderOutputSerializer(serializers.ModelSerializer):
    """Read serializer for returning a complete order representation."""

    drone_name = serializers.CharField(source="drone.name", read_only=True)
    customer_full_name = serializers.CharField(read_only=True)
    delivery_status = serializers.CharField(read_only=True)
    status_history = OrderStatusChangeSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "drone",
            "drone_name",
            "quantity",
            "total_amount",
            "status",
            "payment_status",
            "payment_intent_id",
            "payment_method",
            "shipping_address",
            "customer_info",
            "customer_full_name",
            "order_date",
            "estimated_delivery",
            "actual_delivery",
            "delivery_status",
            "tracking_number",
            "notes",
            "refund_amount",
            "refund_reason",
            "status_history",
            "created_at",
            "updated_at",
        ]


class OrderStatusPatchSerializer(serializers.Serializer):
    """Patch serializer used to move an order to another status."""

    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class OrderCancelSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
