"""Django ORM implementation of the order ledger."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS

from modules.core.outbox import record_events
from modules.orders.events import OrderPlaced
from modules.orders.models import Order, OrderLine
from modules.orders.payments import PaymentDescriptor
from modules.orders.repositories.interfaces import IOrderRepository, OrderLineData

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete order repository bound to one database alias."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self._using = using

    def _orders(self):
        return Order.objects.using(self._using)

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(
        self,
        customer_id: UUID,
        payment: PaymentDescriptor,
        lines: Sequence[OrderLineData],
        total_amount: Decimal,
    ) -> Order:
        order = Order(
            customer_id=customer_id,
            total_amount=total_amount,
            payment_method=payment.method,
            card_last4=payment.card_last4,
            card_expiry=payment.card_expiry,
        )
        order.save(using=self._using)

        for line in lines:
            OrderLine(
                order=order,
                book_id=line.book_id,
                isbn=line.isbn,
                title=line.title,
                unit_price=line.unit_price,
                quantity=line.quantity,
            ).save(using=self._using)

        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(customer_id),
                total_amount=str(total_amount),
                line_count=len(lines),
            )
        )
        record_events(order.domain_events, topic="orders", using=self._using)
        order.clear_domain_events()

        logger.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            line_count=len(lines),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_for_customer(self, customer_id: UUID):
        return (
            self._orders()
            .filter(customer_id=customer_id)
            .prefetch_related("lines")
            .order_by("-created_at", "-id")
        )

    def get_for_customer(self, customer_id: UUID, order_id: UUID) -> Optional[Order]:
        """Returns ``None`` for unknown or malformed ids."""
        try:
            return (
                self._orders()
                .prefetch_related("lines")
                .filter(customer_id=customer_id, id=order_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None
