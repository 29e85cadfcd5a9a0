"""Checkout and order-history use cases.

``CheckoutService`` is the coordinator that turns a cart into an order.  It
owns the transaction boundary: payment validation happens before the
transaction opens, and everything from locking the cart to clearing it
commits or rolls back as one unit.

Lock order inside the transaction is fixed: cart lines, then book rows in
ISBN order, then replenishment rows.  Contention is not retried here; it
surfaces as ``LockTimeout`` and the caller decides whether to try again.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional
from uuid import UUID

import structlog
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.utils import timezone

from modules.catalog.exceptions import BookNotFound
from modules.core.db import is_lock_conflict
from modules.orders.constants import CheckoutPhase
from modules.orders.dtos import CheckoutResultDTO
from modules.orders.exceptions import (
    BookUnavailable,
    CheckoutError,
    EmptyCart,
    InsufficientStock,
    LockTimeout,
    OrderNotFound,
    PersistenceFailure,
)
from modules.orders.payments import PaymentDescriptor
from modules.orders.repositories.interfaces import OrderLineData

if TYPE_CHECKING:
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.catalog.repositories.interfaces import IInventoryRepository
    from modules.orders.dtos import CheckoutDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.replenishment.trigger import ReplenishmentTrigger

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


class CheckoutService:
    """Application service for the checkout use case.

    Receives repositories via constructor injection; all of them must be
    bound to the same database alias as ``using``.
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        inventory_repository: IInventoryRepository,
        order_repository: IOrderRepository,
        replenishment_trigger: ReplenishmentTrigger,
        using: str = DEFAULT_DB_ALIAS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._carts = cart_repository
        self._inventory = inventory_repository
        self._orders = order_repository
        self._replenishment = replenishment_trigger
        self._using = using
        self._clock = clock or timezone.now

    def checkout(self, customer_id: UUID, dto: CheckoutDTO) -> CheckoutResultDTO:
        """Convert the customer's cart into an order.

        Raises:
            PaymentValidation: payment details are malformed or expired.
            EmptyCart: the cart has no lines.
            BookUnavailable: a book in the cart no longer exists.
            InsufficientStock: a line asks for more copies than are in stock.
            LockTimeout: lock contention; nothing was written, retry.
            PersistenceFailure: any other database failure; nothing was written.
        """
        log = logger.bind(customer_id=str(customer_id))
        phase = self._enter(log, CheckoutPhase.VALIDATING)

        try:
            payment = PaymentDescriptor.parse(
                dto, today=timezone.localtime(self._clock()).date()
            )
            with transaction.atomic(using=self._using):
                phase = self._enter(log, CheckoutPhase.LOCKING)
                cart = self._carts.get_or_create_cart(customer_id)
                cart_lines = self._carts.lines_for_checkout(cart)
                if not cart_lines:
                    raise EmptyCart()
                try:
                    snapshots = self._inventory.lock_and_fetch(
                        line.book.isbn for line in cart_lines
                    )
                except BookNotFound as exc:
                    raise BookUnavailable(exc.isbns) from exc
                inventory = {snapshot.isbn: snapshot for snapshot in snapshots}

                phase = self._enter(log, CheckoutPhase.STOCK_CHECKING)
                for line in cart_lines:
                    available = inventory[line.book.isbn].stock_quantity
                    if available < line.quantity:
                        raise InsufficientStock(line.book.isbn, line.quantity, available)

                phase = self._enter(log, CheckoutPhase.COMPUTING)
                order_lines = [
                    OrderLineData(
                        book_id=inventory[line.book.isbn].book_id,
                        isbn=line.book.isbn,
                        title=inventory[line.book.isbn].title,
                        unit_price=inventory[line.book.isbn].price,
                        quantity=line.quantity,
                    )
                    for line in cart_lines
                ]
                total = sum(
                    (item.unit_price * item.quantity for item in order_lines),
                    Decimal("0.00"),
                ).quantize(CENTS)

                phase = self._enter(log, CheckoutPhase.WRITING)
                order = self._orders.create(customer_id, payment, order_lines, total)
                for item in order_lines:
                    snapshot = inventory[item.isbn]
                    stock = self._inventory.decrement_stock(item.book_id, item.quantity)
                    self._replenishment.maybe_request_replenishment(
                        book_id=item.book_id,
                        post_sale_stock=stock,
                        threshold=snapshot.threshold,
                        publisher_id=snapshot.publisher_id,
                        isbn=item.isbn,
                    )
                self._carts.clear(cart, line_ids=[line.id for line in cart_lines])
        except CheckoutError as exc:
            exc.phase = exc.phase or phase
            self._abort(log, exc)
            raise
        except DatabaseError as exc:
            if is_lock_conflict(exc):
                error: CheckoutError = LockTimeout(
                    "Could not lock the cart's books in time; retry the checkout.",
                    phase,
                )
            else:
                error = PersistenceFailure(f"Checkout could not be saved: {exc}", phase)
            self._abort(log, error)
            raise error from exc

        self._enter(log, CheckoutPhase.COMMITTED)
        log.info(
            "checkout.committed",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(total),
            payment_method=payment.method.value,
        )
        return CheckoutResultDTO(
            order_id=order.id, order_number=order.order_number, total=total
        )

    # ------------------------------------------------------------------
    # Phase bookkeeping
    # ------------------------------------------------------------------

    @staticmethod
    def _enter(log, phase: CheckoutPhase) -> CheckoutPhase:
        log.info("checkout.phase_entered", phase=phase.value)
        return phase

    @staticmethod
    def _abort(log, error: CheckoutError) -> None:
        log.warning(
            "checkout.aborted",
            phase=str(error.phase),
            next_phase=CheckoutPhase.ABORTED.value,
            kind=error.kind,
            reason=str(error),
        )


class OrderQueryService:
    """Read side of the order ledger (order history)."""

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._repo = order_repository

    def list_orders(self, customer_id: UUID):
        return self._repo.list_for_customer(customer_id)

    def get_order(self, customer_id: UUID, order_id: UUID) -> Order:
        """Retrieve one of the customer's orders.

        Raises:
            OrderNotFound: if the order does not exist or belongs to someone else.
        """
        order = self._repo.get_for_customer(customer_id, order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order
