"""Cart store repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional
from uuid import UUID

if TYPE_CHECKING:
    from modules.carts.models import Cart, CartLine
    from modules.catalog.models import Book


class ICartRepository(ABC):
    """Repository contract for the Cart aggregate."""

    @abstractmethod
    def get_or_create_cart(self, customer_id: UUID) -> Cart:
        """Return the customer's cart, creating it on first access."""

    @abstractmethod
    def list_lines(self, cart: Cart) -> List[CartLine]:
        """Return the cart lines joined with their books, in ISBN order."""

    @abstractmethod
    def lines_for_checkout(self, cart: Cart) -> List[CartLine]:
        """Return the cart lines row-locked until the transaction ends."""

    @abstractmethod
    def upsert_line(self, cart: Cart, book: Book, delta: int) -> CartLine:
        """Add *delta* to the line for *book*, inserting it if absent.

        Raises ``InvalidQuantity`` when the result leaves ``1..100``.
        """

    @abstractmethod
    def set_line(self, cart: Cart, book: Book, quantity: int) -> CartLine:
        """Set the absolute quantity of the line for *book*."""

    @abstractmethod
    def remove_line(self, cart: Cart, isbn: str) -> bool:
        """Delete the line for *isbn*; ``False`` when there was none."""

    @abstractmethod
    def clear(self, cart: Cart, line_ids: Optional[Iterable[UUID]] = None) -> int:
        """Delete every line, or only *line_ids*; return the number removed."""
