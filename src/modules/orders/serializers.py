"""Order DRF serializers for API input/output.

The serializer operates at the interface layer (API views).  Business logic
lives in the service layer, which receives pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderLine

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CheckoutSerializer(serializers.Serializer):
    """Validates the shape of a checkout request; payment rules live in
    ``PaymentDescriptor``."""

    payment_method = serializers.CharField()
    card_number = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, write_only=True
    )
    card_cvv = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, write_only=True
    )
    card_expiry = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CheckoutResultSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    order_number = serializers.CharField()
    total = serializers.DecimalField(max_digits=10, decimal_places=2)


class OrderLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderLine
        fields = ["isbn", "title", "unit_price", "quantity", "subtotal"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with their lines."""

    lines = OrderLineSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "total_amount",
            "payment_method",
            "card_last4",
            "card_expiry",
            "created_at",
            "lines",
        ]
        read_only_fields = fields
