"""Cart DRF serializers.

Input serializers parse request bodies; output serializers render the
``CartOutputDTO`` produced by the service layer.
"""

from __future__ import annotations

from rest_framework import serializers


class AddItemSerializer(serializers.Serializer):
    isbn = serializers.CharField(max_length=20)
    quantity = serializers.IntegerField(default=1)


class SetQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class CartLineSerializer(serializers.Serializer):
    isbn = serializers.CharField()
    title = serializers.CharField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    quantity = serializers.IntegerField()
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartSerializer(serializers.Serializer):
    cart_id = serializers.UUIDField()
    customer_id = serializers.UUIDField()
    lines = CartLineSerializer(many=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
