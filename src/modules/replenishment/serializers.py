"""Replenishment DRF serializers (output only)."""

from __future__ import annotations

from rest_framework import serializers

from modules.replenishment.models import ReplenishmentRequest


class ReplenishmentRequestSerializer(serializers.ModelSerializer):
    isbn = serializers.CharField(source="book.isbn", read_only=True)
    title = serializers.CharField(source="book.title", read_only=True)
    publisher_name = serializers.CharField(source="publisher.name", read_only=True)

    class Meta:
        model = ReplenishmentRequest
        fields = [
            "id",
            "book",
            "isbn",
            "title",
            "publisher",
            "publisher_name",
            "quantity",
            "status",
            "created_at",
            "resolved_at",
        ]
        read_only_fields = fields
