"""Replenishment API views (staff only)."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.exceptions import BookNotFound
from modules.catalog.repositories.django_repository import InventoryDjangoRepository
from modules.replenishment.exceptions import (
    InvalidReplenishmentStatus,
    ReplenishmentRequestNotFound,
)
from modules.replenishment.filters import ReplenishmentRequestFilter
from modules.replenishment.models import ReplenishmentRequest
from modules.replenishment.repositories.django_repository import (
    ReplenishmentDjangoRepository,
)
from modules.replenishment.serializers import ReplenishmentRequestSerializer
from modules.replenishment.services import ReplenishmentService


class ReplenishmentRequestViewSet(ListModelMixin, GenericViewSet):
    """List, inspect and resolve replenishment requests."""

    permission_classes = [IsAdminUser]
    filterset_class = ReplenishmentRequestFilter
    filter_backends = [DjangoFilterBackend]
    queryset = ReplenishmentRequest.objects.all()
    serializer_class = ReplenishmentRequestSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ReplenishmentService(
            repository=ReplenishmentDjangoRepository(),
            inventory_repository=InventoryDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_requests()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/replenishment-requests/{pk}/"""
        try:
            replenishment = self._service.get_request(pk)
        except ReplenishmentRequestNotFound as exc:
            return Response(
                {"detail": str(exc), "code": "not_found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(ReplenishmentRequestSerializer(replenishment).data)

    @action(detail=True, methods=["post"])
    def fulfill(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/replenishment-requests/{pk}/fulfill/"""
        return self._resolve(self._service.fulfill, pk)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/replenishment-requests/{pk}/cancel/"""
        return self._resolve(self._service.cancel, pk)

    def _resolve(self, command, pk) -> Response:
        try:
            replenishment = command(pk)
        except (ReplenishmentRequestNotFound, BookNotFound) as exc:
            return Response(
                {"detail": str(exc), "code": "not_found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        except InvalidReplenishmentStatus as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_status"},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(ReplenishmentRequestSerializer(replenishment).data)
