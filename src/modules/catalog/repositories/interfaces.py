"""Inventory ledger repository interface.

The checkout coordinator depends on this contract only.  Implementations
must hold the row locks taken by ``lock_and_fetch`` until the enclosing
transaction ends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional
from uuid import UUID

if TYPE_CHECKING:
    from modules.catalog.dtos import InventorySnapshot
    from modules.catalog.models import Book


class IInventoryRepository(ABC):
    """Repository contract for per-book stock."""

    @abstractmethod
    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Retrieve a live (not soft-deleted) book by ISBN."""

    @abstractmethod
    def lock_and_fetch(self, isbns: Iterable[str]) -> List[InventorySnapshot]:
        """Lock every requested book row in one pass, in ISBN order.

        Raises ``BookNotFound`` naming every ISBN that does not exist.
        """

    @abstractmethod
    def decrement_stock(self, book_id: UUID, quantity: int) -> int:
        """Subtract *quantity* from a locked row; return the stored result."""

    @abstractmethod
    def restock(self, book_id: UUID, quantity: int) -> int:
        """Add *quantity* to a book's stock; return the stored result."""
