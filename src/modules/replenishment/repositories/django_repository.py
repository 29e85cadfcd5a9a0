"""Django ORM implementation of the replenishment request repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS

from modules.core.outbox import record_events
from modules.replenishment.events import ReplenishmentRequested
from modules.replenishment.models import ReplenishmentRequest, ReplenishmentStatus
from modules.replenishment.repositories.interfaces import IReplenishmentRepository

logger = structlog.get_logger(__name__)


class ReplenishmentDjangoRepository(IReplenishmentRepository):
    """Concrete repository bound to one database alias."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self._using = using

    def _requests(self):
        return ReplenishmentRequest.objects.using(self._using)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def get_or_create_pending(
        self,
        book_id: UUID,
        publisher_id: UUID,
        quantity: int,
        isbn: str = "",
    ) -> Tuple[ReplenishmentRequest, bool]:
        request, created = self._requests().get_or_create(
            book_id=book_id,
            status=ReplenishmentStatus.PENDING,
            defaults={"publisher_id": publisher_id, "quantity": quantity},
        )
        if created:
            record_events(
                [
                    ReplenishmentRequested(
                        aggregate_id=request.id,
                        book_id=str(book_id),
                        isbn=isbn,
                        publisher_id=str(publisher_id),
                        quantity=quantity,
                    )
                ],
                topic="replenishment",
                using=self._using,
            )
        return request, created

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self, filters: Optional[Dict[str, Any]] = None):
        queryset = self._requests().select_related("book", "publisher")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at")

    def get_by_id(self, id: UUID) -> Optional[ReplenishmentRequest]:
        try:
            return (
                self._requests()
                .select_related("book", "publisher")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: UUID) -> Optional[ReplenishmentRequest]:
        try:
            return self._requests().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def resolve(
        self, request: ReplenishmentRequest, status: str, resolved_at: datetime
    ) -> ReplenishmentRequest:
        request.status = status
        request.resolved_at = resolved_at
        request.save(using=self._using, update_fields=["status", "resolved_at"])
        logger.info(
            "replenishment.resolved",
            request_id=str(request.id),
            status=status,
        )
        return request
