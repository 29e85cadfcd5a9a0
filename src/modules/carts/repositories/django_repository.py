"""Django ORM implementation of the cart store.

Two requests adding the same book at the same moment both try to insert the
line; the loser hits ``cart_lines_one_line_per_book`` and falls back to
incrementing the winner's row under a lock, so the two additions merge.
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

import structlog
from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from modules.carts.exceptions import InvalidQuantity
from modules.carts.models import MAX_LINE_QUANTITY, Cart, CartLine
from modules.carts.repositories.interfaces import ICartRepository
from modules.catalog.models import Book, normalize_isbn

logger = structlog.get_logger(__name__)


def _check_quantity(quantity: int) -> None:
    if quantity < 1 or quantity > MAX_LINE_QUANTITY:
        raise InvalidQuantity(quantity, MAX_LINE_QUANTITY)


class CartDjangoRepository(ICartRepository):
    """Concrete cart repository bound to one database alias."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self._using = using

    def _lines(self):
        return CartLine.objects.using(self._using)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_or_create_cart(self, customer_id: UUID) -> Cart:
        cart, created = Cart.objects.using(self._using).get_or_create(
            customer_id=customer_id
        )
        if created:
            logger.info("cart.created", cart_id=str(cart.id), customer_id=str(customer_id))
        return cart

    def list_lines(self, cart: Cart) -> List[CartLine]:
        return list(
            self._lines()
            .filter(cart=cart)
            .select_related("book")
            .order_by("book__isbn")
        )

    def lines_for_checkout(self, cart: Cart) -> List[CartLine]:
        """Lock the lines so a concurrent edit waits for the checkout to end.

        The lock query touches the cart_lines table only; book rows are
        locked separately, in ISBN order, by the inventory ledger.
        """
        locked_ids = list(
            self._lines()
            .select_for_update()
            .filter(cart=cart)
            .order_by("id")
            .values_list("id", flat=True)
        )
        if not locked_ids:
            return []
        return list(
            self._lines()
            .filter(id__in=locked_ids)
            .select_related("book")
            .order_by("book__isbn")
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def upsert_line(self, cart: Cart, book: Book, delta: int) -> CartLine:
        with transaction.atomic(using=self._using):
            line = self._locked_line(cart, book)
            if line is not None:
                return self._increment(line, delta)

            _check_quantity(delta)
            try:
                with transaction.atomic(using=self._using):
                    line = self._lines().create(cart=cart, book=book, quantity=delta)
            except IntegrityError:
                # Lost the insert race: the other request's row now exists.
                line = self._locked_line(cart, book)
                if line is None:
                    raise
                return self._increment(line, delta)

        logger.info(
            "cart.line_added",
            cart_id=str(cart.id),
            isbn=book.isbn,
            quantity=line.quantity,
        )
        return line

    def set_line(self, cart: Cart, book: Book, quantity: int) -> CartLine:
        _check_quantity(quantity)
        with transaction.atomic(using=self._using):
            line, created = self._lines().select_for_update().get_or_create(
                cart=cart, book=book, defaults={"quantity": quantity}
            )
            if not created and line.quantity != quantity:
                line.quantity = quantity
                line.save(update_fields=["quantity"])
        logger.info(
            "cart.line_set", cart_id=str(cart.id), isbn=book.isbn, quantity=quantity
        )
        return line

    def remove_line(self, cart: Cart, isbn: str) -> bool:
        deleted, _ = (
            self._lines()
            .filter(cart=cart, book__isbn=normalize_isbn(isbn))
            .delete()
        )
        logger.info("cart.line_removed", cart_id=str(cart.id), isbn=isbn, removed=bool(deleted))
        return bool(deleted)

    def clear(self, cart: Cart, line_ids: Optional[Iterable[UUID]] = None) -> int:
        queryset = self._lines().filter(cart=cart)
        if line_ids is not None:
            queryset = queryset.filter(id__in=list(line_ids))
        deleted, _ = queryset.delete()
        logger.info("cart.cleared", cart_id=str(cart.id), lines_removed=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _locked_line(self, cart: Cart, book: Book) -> Optional[CartLine]:
        return (
            self._lines()
            .select_for_update()
            .filter(cart=cart, book=book)
            .order_by()
            .first()
        )

    def _increment(self, line: CartLine, delta: int) -> CartLine:
        quantity = line.quantity + delta
        _check_quantity(quantity)
        self._lines().filter(id=line.id).update(
            quantity=F("quantity") + delta, updated_at=timezone.now()
        )
        line.quantity = quantity
        logger.info(
            "cart.line_incremented",
            cart_id=str(line.cart_id),
            line_id=str(line.id),
            quantity=quantity,
        )
        return line
