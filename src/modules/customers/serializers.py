"""Customer DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """Read serializer for the authenticated customer's own profile."""

    class Meta:
        model = Customer
        fields = [
            "id",
            "first_name",
            "last_name",
            "email",
            "phone",
            "shipping_address",
            "created_at",
        ]
        read_only_fields = fields
