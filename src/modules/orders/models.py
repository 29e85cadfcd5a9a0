"""Order and OrderLine models.

Rules implemented:
- Orders and their lines are append-only: once inserted they are never
  updated or deleted (``AppendOnlyModel``).
- ``order_number`` is a human-readable identifier generated on insert
  (format ``BK-YYYYMMDD-XXXXXX``); the UUIDv7 ``id`` is used everywhere else.
- Customer and book FKs use PROTECT to preserve financial history.
- Each line snapshots the book's ISBN, title and price at the time of sale.
- ``subtotal`` is always ``quantity * unit_price`` (calculated on save).
- Only the card's last four digits and expiry are stored, never the number
  or the CVV.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

from django.core.validators import MinValueValidator
from django.db import DEFAULT_DB_ALIAS, IntegrityError, models
from django.utils import timezone

from modules.core.models import AppendOnlyModel
from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    ORDER_NUMBER_PREFIX,
    PaymentMethod,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, AppendOnlyModel):
    """Order aggregate root."""

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    card_last4 = models.CharField(max_length=4, null=True, blank=True)  # noqa: DJ01
    card_expiry = models.CharField(max_length=5, null=True, blank=True)  # noqa: DJ01

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["customer", "-created_at"],
                name="orders_customer_created_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``BK-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"{ORDER_NUMBER_PREFIX}-{now:%Y%m%d}-{suffix}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            using = kwargs.get("using") or self._state.db or DEFAULT_DB_ALIAS
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.using(using).filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise IntegrityError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.total_amount})"


class OrderLine(AppendOnlyModel):
    """One book sold within an order, priced at the moment of sale."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    book = models.ForeignKey(
        "catalog.Book",
        on_delete=models.PROTECT,
        related_name="order_lines",
    )
    isbn = models.CharField(max_length=20)
    title = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, editable=False)

    class Meta:
        db_table = "order_lines"
        ordering = ["isbn"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_lines_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.isbn} x{self.quantity} (${self.subtotal})"
