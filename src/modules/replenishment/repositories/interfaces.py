"""Replenishment request repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple
from uuid import UUID

from django.db import models

if TYPE_CHECKING:
    from modules.replenishment.models import ReplenishmentRequest


class IReplenishmentRepository(ABC):
    """Repository contract for replenishment requests."""

    @abstractmethod
    def get_or_create_pending(
        self,
        book_id: UUID,
        publisher_id: UUID,
        quantity: int,
        isbn: str = "",
    ) -> Tuple[ReplenishmentRequest, bool]:
        """Return the book's pending request, creating it when none exists.

        The caller must hold the book row lock.  A ``ReplenishmentRequested``
        outbox event is written only when a row is created.
        """

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[ReplenishmentRequest]":
        """List requests, newest first."""

    @abstractmethod
    def get_by_id(self, id: UUID) -> Optional[ReplenishmentRequest]:
        """Retrieve a request (with its book) or ``None``."""

    @abstractmethod
    def get_for_update(self, id: UUID) -> Optional[ReplenishmentRequest]:
        """Retrieve a request with a row-level lock."""

    @abstractmethod
    def resolve(
        self, request: ReplenishmentRequest, status: str, resolved_at: datetime
    ) -> ReplenishmentRequest:
        """Move a pending request to a terminal status."""
