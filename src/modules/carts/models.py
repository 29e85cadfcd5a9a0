"""Cart and CartLine models.

Rules implemented:
- One cart per customer (unique FK), created lazily on first access.
- One line per book within a cart (unique ``(cart, book)``); concurrent
  additions of the same book merge into that line.
- ``1 <= quantity <= MAX_LINE_QUANTITY`` (100), checked by the
  repository and backed by a DB check constraint.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel

MAX_LINE_QUANTITY = 100


class Cart(BaseModel):
    """The customer's single active shopping cart."""

    customer = models.OneToOneField(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="cart",
    )

    class Meta:
        db_table = "carts"

    def __str__(self) -> str:
        return f"Cart {self.id} (customer {self.customer_id})"


class CartLine(BaseModel):
    """A (book, quantity) pairing in a cart.

    No price is stored: the cart always shows the current catalog price and
    the price is only snapshotted into an ``OrderLine`` at checkout.
    """

    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    book = models.ForeignKey(
        "catalog.Book",
        on_delete=models.CASCADE,
        related_name="cart_lines",
    )
    quantity = models.PositiveIntegerField()

    class Meta:
        db_table = "cart_lines"
        ordering = ["book__isbn"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "book"],
                name="cart_lines_one_line_per_book",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1)
                & models.Q(quantity__lte=MAX_LINE_QUANTITY),
                name="cart_lines_quantity_in_range",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return self.book.price * self.quantity

    def __str__(self) -> str:
        return f"{self.book_id} x{self.quantity}"
