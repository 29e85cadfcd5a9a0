"""Domain events for the replenishment bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class ReplenishmentRequested(DomainEvent):
    """A new pending request was opened for a book (aggregate: the request)."""

    book_id: str = ""
    isbn: str = ""
    publisher_id: str = ""
    quantity: int = 0


@dataclass(frozen=True)
class ReplenishmentFulfilled(DomainEvent):
    """Stock for the request's book was received and added to inventory."""

    book_id: str = ""
    quantity: int = 0
    stock_quantity: int = 0
