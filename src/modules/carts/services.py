"""Cart service layer (use cases).

Orchestrates the cart endpoints over ``ICartRepository`` and the inventory
ledger's read side.  The book must exist (and not be soft-deleted) to be
added; stock is not checked here, only at checkout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from django.db import transaction

from modules.carts.dtos import AddItemDTO, CartOutputDTO
from modules.catalog.exceptions import BookNotFound

if TYPE_CHECKING:
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.catalog.models import Book
    from modules.catalog.repositories.interfaces import IInventoryRepository

logger = structlog.get_logger(__name__)


class CartService:
    """Application service for cart use cases."""

    def __init__(
        self,
        cart_repository: ICartRepository,
        inventory_repository: IInventoryRepository,
    ) -> None:
        self._carts = cart_repository
        self._inventory = inventory_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def view_cart(self, customer_id: UUID) -> CartOutputDTO:
        cart = self._carts.get_or_create_cart(customer_id)
        return CartOutputDTO.from_entity(cart, self._carts.list_lines(cart))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_item(self, customer_id: UUID, dto: AddItemDTO) -> CartOutputDTO:
        """Increment the line for ``dto.isbn`` by ``dto.quantity``.

        Raises:
            BookNotFound: if the ISBN is unknown or soft-deleted.
            InvalidQuantity: if the line would leave ``1..100``.
        """
        book = self._get_book(dto.isbn)
        cart = self._carts.get_or_create_cart(customer_id)
        self._carts.upsert_line(cart, book, dto.quantity)
        return CartOutputDTO.from_entity(cart, self._carts.list_lines(cart))

    @transaction.atomic
    def set_item(self, customer_id: UUID, isbn: str, quantity: int) -> CartOutputDTO:
        """Set the absolute quantity of a line.

        Raises:
            BookNotFound: if the ISBN is unknown or soft-deleted.
            InvalidQuantity: if *quantity* is outside ``1..100``.
        """
        book = self._get_book(isbn)
        cart = self._carts.get_or_create_cart(customer_id)
        self._carts.set_line(cart, book, quantity)
        return CartOutputDTO.from_entity(cart, self._carts.list_lines(cart))

    def remove_item(self, customer_id: UUID, isbn: str) -> bool:
        cart = self._carts.get_or_create_cart(customer_id)
        return self._carts.remove_line(cart, isbn)

    def clear_cart(self, customer_id: UUID) -> int:
        """Empty the cart; clearing an empty cart is a no-op."""
        cart = self._carts.get_or_create_cart(customer_id)
        return self._carts.clear(cart)

    def _get_book(self, isbn: str) -> Book:
        book = self._inventory.get_by_isbn(isbn)
        if book is None:
            logger.warning("cart.book_not_found", isbn=isbn)
            raise BookNotFound([isbn])
        return book
