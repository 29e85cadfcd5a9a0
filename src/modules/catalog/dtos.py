"""Catalog DTOs.

``InventorySnapshot`` is what the inventory ledger hands to the checkout
coordinator for each locked book row: the values the stock check, the price
snapshot and the replenishment decision are computed from.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.catalog.models import Book


class InventorySnapshot(BaseModel):
    """Immutable view of a locked book row."""

    model_config = ConfigDict(frozen=True)

    book_id: UUID
    isbn: str
    title: str
    price: Decimal
    stock_quantity: int
    threshold: int
    publisher_id: UUID

    @classmethod
    def from_entity(cls, book: Book) -> InventorySnapshot:
        return cls(
            book_id=book.id,
            isbn=book.isbn,
            title=book.title,
            price=book.price,
            stock_quantity=book.stock_quantity,
            threshold=book.threshold,
            publisher_id=book.publisher_id,
        )
