"""Order ledger repository interface.

The checkout coordinator depends exclusively on this contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Sequence
from uuid import UUID

from django.db import models

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.payments import PaymentDescriptor


@dataclass(frozen=True)
class OrderLineData:
    """A priced line ready to be written to the ledger."""

    book_id: UUID
    isbn: str
    title: str
    unit_price: Decimal
    quantity: int


class IOrderRepository(ABC):
    """Repository contract for the Order aggregate."""

    @abstractmethod
    def create(
        self,
        customer_id: UUID,
        payment: PaymentDescriptor,
        lines: Sequence[OrderLineData],
        total_amount: Decimal,
    ) -> Order:
        """Insert the order, its lines and an ``OrderPlaced`` outbox event.

        Must run inside the checkout transaction.
        """

    @abstractmethod
    def list_for_customer(self, customer_id: UUID) -> "models.QuerySet[Order]":
        """The customer's orders with their lines, newest first."""

    @abstractmethod
    def get_for_customer(self, customer_id: UUID, order_id: UUID) -> Optional[Order]:
        """One of the customer's orders, or ``None``."""
