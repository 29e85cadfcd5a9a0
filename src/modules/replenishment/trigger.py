"""Replenishment trigger invoked by the checkout transaction.

After each per-book stock decrement the checkout hands the re-read stock
value here.  When it sits at or below the book's threshold a pending
request for ``threshold * REPLENISHMENT_REORDER_FACTOR`` copies is opened,
unless the book already has one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog
from django.conf import settings

if TYPE_CHECKING:
    from modules.replenishment.models import ReplenishmentRequest
    from modules.replenishment.repositories.interfaces import IReplenishmentRepository

logger = structlog.get_logger(__name__)


class ReplenishmentTrigger:
    def __init__(
        self,
        repository: IReplenishmentRepository,
        reorder_factor: Optional[int] = None,
    ) -> None:
        self._repo = repository
        self._reorder_factor = (
            settings.REPLENISHMENT_REORDER_FACTOR
            if reorder_factor is None
            else reorder_factor
        )

    def maybe_request_replenishment(
        self,
        book_id: UUID,
        post_sale_stock: int,
        threshold: int,
        publisher_id: UUID,
        isbn: str = "",
    ) -> Optional[ReplenishmentRequest]:
        """Open a pending request if the sale crossed the threshold.

        Returns the book's pending request (new or existing), or ``None``
        when no replenishment is needed.  A threshold of 0 disables
        automatic replenishment for the book.

        Must run inside the checkout transaction, after the book row lock
        was taken, so two checkouts of the same book cannot both insert.
        """
        if threshold <= 0 or post_sale_stock > threshold:
            return None

        log = logger.bind(book_id=str(book_id), isbn=isbn, stock_quantity=post_sale_stock)
        request, created = self._repo.get_or_create_pending(
            book_id=book_id,
            publisher_id=publisher_id,
            quantity=threshold * self._reorder_factor,
            isbn=isbn,
        )
        if created:
            log.info(
                "replenishment.requested",
                request_id=str(request.id),
                quantity=request.quantity,
            )
        else:
            log.info("replenishment.already_pending", request_id=str(request.id))
        return request
