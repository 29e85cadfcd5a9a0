"""Catalog models: publishers (suppliers) and books (inventory records).

Rules implemented:
- ``isbn`` is the unique catalog key, normalised (hyphens/spaces removed,
  upper-case) on save.
- ``price`` is fixed-point and never negative.
- ``stock_quantity`` never goes negative (PositiveIntegerField + DB check).
- ``threshold`` is the stock level at or below which a replenishment
  request is raised; ``0`` disables automatic replenishment.
- Soft delete via ``deleted_at``: a soft-deleted book no longer exists for
  carts and checkout.
"""

from __future__ import annotations

import re
from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel

logger = structlog.get_logger(__name__)


def normalize_isbn(value: str) -> str:
    """Strip separators and upper-case the check character (``X``)."""
    return re.sub(r"[\s-]", "", value or "").upper()


class Publisher(BaseModel):
    """Supplier that replenishment requests are addressed to."""

    name = models.CharField(max_length=255, unique=True)
    email = models.EmailField(max_length=254, blank=True, default="")

    class Meta:
        db_table = "publishers"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Book(SoftDeleteModel):
    """Book aggregate: catalog entry and inventory ledger row."""

    isbn = models.CharField(max_length=20, unique=True)
    title = models.CharField(max_length=255)
    publisher = models.ForeignKey(
        Publisher,
        on_delete=models.PROTECT,
        related_name="books",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    threshold = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "books"
        ordering = ["title"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="books_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="books_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        self.isbn = normalize_isbn(self.isbn)
        if not self.isbn:
            raise ValidationError({"isbn": "ISBN is required."})
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        self.isbn = normalize_isbn(self.isbn)
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "book.created",
                book_id=str(self.id),
                isbn=self.isbn,
                stock_quantity=self.stock_quantity,
                threshold=self.threshold,
            )

    @property
    def is_available(self) -> bool:
        return self.stock_quantity > 0 and not self.is_deleted

    def __str__(self) -> str:
        return f"{self.isbn} - {self.title}"
