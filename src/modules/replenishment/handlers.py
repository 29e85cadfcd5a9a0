"""Event handlers for replenishment domain events."""

from __future__ import annotations

import structlog

from modules.replenishment.events import ReplenishmentFulfilled, ReplenishmentRequested
from shared.domain.events import IEventHandler

logger = structlog.get_logger(__name__)


class ReplenishmentRequestedHandler(IEventHandler[ReplenishmentRequested]):
    """Hand-off point to the publisher ordering workflow."""

    def handle(self, event: ReplenishmentRequested) -> None:
        logger.info(
            "replenishment.publisher_notified",
            request_id=str(event.aggregate_id),
            publisher_id=event.publisher_id,
            isbn=event.isbn,
            quantity=event.quantity,
        )


class ReplenishmentFulfilledHandler(IEventHandler[ReplenishmentFulfilled]):
    def handle(self, event: ReplenishmentFulfilled) -> None:
        logger.info(
            "replenishment.stock_received",
            request_id=str(event.aggregate_id),
            book_id=event.book_id,
            stock_quantity=event.stock_quantity,
        )


replenishment_requested_handler = ReplenishmentRequestedHandler()
replenishment_fulfilled_handler = ReplenishmentFulfilledHandler()
