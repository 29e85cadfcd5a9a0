"""Django ORM implementation of the inventory ledger.

Concurrency control uses ``select_for_update()``: a checkout locks all the
book rows it is about to sell with a single ``SELECT … FOR UPDATE … ORDER BY
isbn`` so two checkouts sharing books always acquire their locks in the
same order and cannot deadlock each other.
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections, transaction
from django.db.models import F
from django.utils import timezone

from modules.catalog.dtos import InventorySnapshot
from modules.catalog.exceptions import BookNotFound
from modules.catalog.models import Book, normalize_isbn
from modules.catalog.repositories.interfaces import IInventoryRepository
from modules.core.db import apply_lock_timeout

logger = structlog.get_logger(__name__)


class InventoryDjangoRepository(IInventoryRepository):
    """Concrete inventory repository bound to one database alias."""

    def __init__(
        self,
        using: str = DEFAULT_DB_ALIAS,
        lock_timeout_ms: Optional[int] = None,
    ) -> None:
        self._using = using
        self._lock_timeout_ms = (
            settings.CHECKOUT_LOCK_TIMEOUT_MS
            if lock_timeout_ms is None
            else lock_timeout_ms
        )

    def _books(self):
        return Book.objects.using(self._using)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        return self._books().alive().filter(isbn=normalize_isbn(isbn)).first()

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def lock_and_fetch(self, isbns: Iterable[str]) -> List[InventorySnapshot]:
        """Lock the requested rows for the rest of the transaction.

        Must run inside ``transaction.atomic(using=...)`` on the same alias.
        """
        wanted = sorted({normalize_isbn(isbn) for isbn in isbns})
        if not wanted:
            return []

        apply_lock_timeout(connections[self._using], self._lock_timeout_ms)
        books = list(
            self._books()
            .select_for_update()
            .alive()
            .filter(isbn__in=wanted)
            .order_by("isbn")
        )

        missing = set(wanted) - {book.isbn for book in books}
        if missing:
            logger.warning("inventory.books_missing", isbns=sorted(missing))
            raise BookNotFound(missing)

        logger.info("inventory.rows_locked", isbns=wanted)
        return [InventorySnapshot.from_entity(book) for book in books]

    # ------------------------------------------------------------------
    # Stock mutation
    # ------------------------------------------------------------------

    def decrement_stock(self, book_id: UUID, quantity: int) -> int:
        """Decrement and re-read the authoritative stock value.

        The caller has already verified ``stock >= quantity`` under the row
        lock; the ``stock_quantity >= 0`` check constraint is the backstop.
        """
        return self._adjust(book_id, -quantity, "inventory.stock_decremented")

    def restock(self, book_id: UUID, quantity: int) -> int:
        if quantity <= 0:
            raise ValueError("Restock quantity must be positive.")
        with transaction.atomic(using=self._using):
            return self._adjust(book_id, quantity, "inventory.restocked")

    def _adjust(self, book_id: UUID, delta: int, event: str) -> int:
        updated = self._books().filter(id=book_id).update(
            stock_quantity=F("stock_quantity") + delta,
            updated_at=timezone.now(),
        )
        if not updated:
            raise BookNotFound([str(book_id)])
        stock = (
            self._books().filter(id=book_id).values_list("stock_quantity", flat=True).get()
        )
        logger.info(event, book_id=str(book_id), delta=delta, stock_quantity=stock)
        return stock
