"""Replenishment service layer (use cases).

Staff-facing workflow for resolving the requests opened by checkout.
Fulfilling a request takes the book row lock before the request row lock,
matching the checkout's order (books, then replenishment rows).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.outbox import record_events
from modules.replenishment.events import ReplenishmentFulfilled
from modules.replenishment.exceptions import (
    InvalidReplenishmentStatus,
    ReplenishmentRequestNotFound,
)
from modules.replenishment.models import ReplenishmentRequest, ReplenishmentStatus

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IInventoryRepository
    from modules.replenishment.repositories.interfaces import IReplenishmentRepository

logger = structlog.get_logger(__name__)


class ReplenishmentService:
    def __init__(
        self,
        repository: IReplenishmentRepository,
        inventory_repository: IInventoryRepository,
    ) -> None:
        self._repo = repository
        self._inventory = inventory_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_requests(self, filters: Optional[Dict[str, Any]] = None):
        return self._repo.list(filters)

    def get_request(self, id: UUID) -> ReplenishmentRequest:
        """Retrieve a single request.

        Raises:
            ReplenishmentRequestNotFound: if the request does not exist.
        """
        request = self._repo.get_by_id(id)
        if request is None:
            raise ReplenishmentRequestNotFound(f"Replenishment request {id} not found.")
        return request

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def fulfill(self, id: UUID) -> ReplenishmentRequest:
        """Receive the requested copies into stock.

        Raises:
            ReplenishmentRequestNotFound: if the request does not exist.
            InvalidReplenishmentStatus: if the request is no longer pending.
            BookNotFound: if the book was removed from the catalog.
        """
        request = self.get_request(id)
        self._inventory.lock_and_fetch([request.book.isbn])

        request = self._locked(id)
        if not request.is_pending:
            logger.warning(
                "replenishment.invalid_transition",
                request_id=str(id),
                status=request.status,
                action="fulfill",
            )
            raise InvalidReplenishmentStatus(id, request.status, "fulfill")

        stock = self._inventory.restock(request.book_id, request.quantity)
        request = self._repo.resolve(request, ReplenishmentStatus.FULFILLED, timezone.now())
        record_events(
            [
                ReplenishmentFulfilled(
                    aggregate_id=request.id,
                    book_id=str(request.book_id),
                    quantity=request.quantity,
                    stock_quantity=stock,
                )
            ],
            topic="replenishment",
        )
        logger.info(
            "replenishment.fulfilled",
            request_id=str(id),
            book_id=str(request.book_id),
            stock_quantity=stock,
        )
        return request

    @transaction.atomic
    def cancel(self, id: UUID) -> ReplenishmentRequest:
        """Drop a pending request without touching stock.

        Raises:
            ReplenishmentRequestNotFound: if the request does not exist.
            InvalidReplenishmentStatus: if the request is no longer pending.
        """
        request = self._locked(id)
        if not request.is_pending:
            logger.warning(
                "replenishment.invalid_transition",
                request_id=str(id),
                status=request.status,
                action="cancel",
            )
            raise InvalidReplenishmentStatus(id, request.status, "cancel")
        request = self._repo.resolve(request, ReplenishmentStatus.CANCELLED, timezone.now())
        logger.info("replenishment.cancelled", request_id=str(id))
        return request

    def _locked(self, id: UUID) -> ReplenishmentRequest:
        request = self._repo.get_for_update(id)
        if request is None:
            raise ReplenishmentRequestNotFound(f"Replenishment request {id} not found.")
        return request
