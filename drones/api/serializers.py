"""Drones API serializers.

Provide serializers for reading drones, creating them with an initial stock
level, patching catalogue fields (never the stock count) and restocking.
"""

from decimal import Decimal
from rest_framework import serializers

from ..models import Drone


class DroneSerializer(serializers.ModelSerializer):
    """Read serializer including the computed availability label."""

    availability_status = serializers.ReadOnlyField()

    class Meta:
        model = Drone
        fields = [
            "id",
            "name",
            "model",
            "description",
            "category",
            "price",
            "stock_quantity",
            "in_stock",
            "availability_status",
            "featured",
            "created_at",
            "updated_at",
        ]


class DroneCreateSerializer(serializers.ModelSerializer):
    """Create serializer; the initial stock level is set here and nowhere else.

    `in_stock` is derived from the initial count unless given explicitly.
    """

    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100000")
    )
    stock_quantity = serializers.IntegerField(min_value=0, required=False, default=0)

    class Meta:
        model = Drone
        fields = [
            "name",
            "model",
            "description",
            "category",
            "price",
            "stock_quantity",
            "in_stock",
            "featured",
        ]

    def create(self, validated_data):
        validated_data.setdefault("in_stock", validated_data["stock_quantity"] > 0)
        return super().create(validated_data)


class DronePatchSerializer(serializers.ModelSerializer):
    """PATCH serializer for catalogue fields; `in_stock` may hide a listing."""

    price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100000"),
        required=False,
    )

    class Meta:
        model = Drone
        fields = ["name", "model", "description", "category", "price", "in_stock", "featured"]


class RestockSerializer(serializers.Serializer):
    """Input for POST /api/drones/{id}/restock/."""

    quantity = serializers.IntegerField(min_value=1, max_value=10000)
