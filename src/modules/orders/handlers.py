"""Event handlers for orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderPlaced
from shared.domain.events import IEventHandler

logger = structlog.get_logger(__name__)


class OrderPlacedHandler(IEventHandler[OrderPlaced]):
    """Hand-off point for order confirmation (e-mail, fulfilment)."""

    def handle(self, event: OrderPlaced) -> None:
        logger.info(
            "order.confirmation_dispatched",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            customer_id=event.customer_id,
        )


order_placed_handler = OrderPlacedHandler()
