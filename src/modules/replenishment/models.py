"""ReplenishmentRequest model.

A request asks the book's publisher for more copies.  It is created by the
checkout transaction when a sale leaves stock at or below the book's
threshold, and resolved later by staff (``fulfill`` restocks, ``cancel``
drops it).

At most one ``PENDING`` request exists per book.  The checkout enforces it
under the book row lock; the partial unique constraint is the backstop on
backends that support conditional indexes.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class ReplenishmentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    FULFILLED = "FULFILLED", "Fulfilled"
    CANCELLED = "CANCELLED", "Cancelled"


class ReplenishmentRequest(BaseModel):
    book = models.ForeignKey(
        "catalog.Book",
        on_delete=models.PROTECT,
        related_name="replenishment_requests",
    )
    publisher = models.ForeignKey(
        "catalog.Publisher",
        on_delete=models.PROTECT,
        related_name="replenishment_requests",
    )
    quantity = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20,
        choices=ReplenishmentStatus.choices,
        default=ReplenishmentStatus.PENDING,
        db_index=True,
    )
    resolved_at = models.DateTimeField(null=True, blank=True, default=None)

    class Meta:
        db_table = "replenishment_requests"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["book"],
                condition=models.Q(status="PENDING"),
                name="replenishment_one_pending_per_book",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="replenishment_quantity_positive",
            ),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == ReplenishmentStatus.PENDING

    def __str__(self) -> str:
        return f"Replenishment {self.id} [{self.status}] {self.book_id} x{self.quantity}"
