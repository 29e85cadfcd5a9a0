"""Domain events for the orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """A checkout committed a new order (aggregate: the order)."""

    order_number: str = ""
    customer_id: str = ""
    total_amount: str = "0.00"
    line_count: int = 0
