"""Checkout and order domain exceptions.

Raised by the service layer; the API views translate them into HTTP
responses using each error's stable ``kind``.
"""

from __future__ import annotations

from typing import Iterable, Optional


class OrderNotFound(Exception):
    """The requested order does not exist for this customer."""


class CheckoutError(Exception):
    """Base class for every reason a checkout can abort.

    ``phase`` is the checkout phase the error aborted in; it is filled in by
    ``CheckoutService`` when the error leaves the transaction.
    """

    kind = "checkout_error"

    def __init__(self, message: str, phase: Optional[str] = None) -> None:
        super().__init__(message)
        self.phase = phase


class PaymentValidation(CheckoutError):
    kind = "payment_validation"


class EmptyCart(CheckoutError):
    kind = "empty_cart"

    def __init__(self, phase: Optional[str] = None) -> None:
        super().__init__("The cart is empty.", phase)


class BookUnavailable(CheckoutError):
    """A book in the cart no longer exists in the catalog."""

    kind = "not_found"

    def __init__(self, isbns: Iterable[str], phase: Optional[str] = None) -> None:
        self.isbns = sorted(isbns)
        super().__init__(
            f"Book(s) no longer available: {', '.join(self.isbns)}.", phase
        )


class InsufficientStock(CheckoutError):
    kind = "insufficient_stock"

    def __init__(
        self,
        isbn: str,
        requested: int,
        available: int,
        phase: Optional[str] = None,
    ) -> None:
        self.isbn = isbn
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {isbn}: requested {requested}, "
            f"available {available}.",
            phase,
        )


class LockTimeout(CheckoutError):
    """Lock contention (wait timeout, deadlock, serialisation failure).

    The whole transaction was rolled back; the caller may retry.
    """

    kind = "lock_timeout"


class PersistenceFailure(CheckoutError):
    kind = "persistence_failure"
