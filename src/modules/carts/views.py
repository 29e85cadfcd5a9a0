"""Cart API views.

Every route is scoped to ``customers/<customer_id>/`` and guarded by
``IsCustomerOwner``.  Domain exceptions are translated into HTTP responses
here; nothing else is caught.
"""

from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.carts.dtos import AddItemDTO
from modules.carts.exceptions import InvalidQuantity
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.serializers import (
    AddItemSerializer,
    CartSerializer,
    SetQuantitySerializer,
)
from modules.carts.services import CartService
from modules.catalog.exceptions import BookNotFound
from modules.catalog.repositories.django_repository import InventoryDjangoRepository
from modules.customers.permissions import IsCustomerOwner


def _build_service() -> CartService:
    return CartService(
        cart_repository=CartDjangoRepository(),
        inventory_repository=InventoryDjangoRepository(),
    )


def _error(exc: Exception, code: str, http_status: int) -> Response:
    return Response({"detail": str(exc), "code": code}, status=http_status)


class CartView(APIView):
    """GET / POST / DELETE /api/v1/customers/{customer_id}/cart/"""

    permission_classes = [IsAuthenticated, IsCustomerOwner]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    @extend_schema(responses=CartSerializer)
    def get(self, request: Request, customer_id: UUID) -> Response:
        cart = self._service.view_cart(customer_id)
        return Response(CartSerializer(cart.model_dump()).data)

    @extend_schema(request=AddItemSerializer, responses=CartSerializer)
    def post(self, request: Request, customer_id: UUID) -> Response:
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = AddItemDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return _error(exc, "invalid_request", status.HTTP_400_BAD_REQUEST)

        try:
            cart = self._service.add_item(customer_id, dto)
        except InvalidQuantity as exc:
            return _error(exc, "invalid_quantity", status.HTTP_400_BAD_REQUEST)
        except BookNotFound as exc:
            return _error(exc, "not_found", status.HTTP_404_NOT_FOUND)
        return Response(CartSerializer(cart.model_dump()).data, status=status.HTTP_201_CREATED)

    def delete(self, request: Request, customer_id: UUID) -> Response:
        self._service.clear_cart(customer_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CartLineView(APIView):
    """PUT / DELETE /api/v1/customers/{customer_id}/cart/{isbn}/"""

    permission_classes = [IsAuthenticated, IsCustomerOwner]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    @extend_schema(request=SetQuantitySerializer, responses=CartSerializer)
    def put(self, request: Request, customer_id: UUID, isbn: str) -> Response:
        serializer = SetQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            cart = self._service.set_item(
                customer_id, isbn, serializer.validated_data["quantity"]
            )
        except InvalidQuantity as exc:
            return _error(exc, "invalid_quantity", status.HTTP_400_BAD_REQUEST)
        except BookNotFound as exc:
            return _error(exc, "not_found", status.HTTP_404_NOT_FOUND)
        return Response(CartSerializer(cart.model_dump()).data)

    def delete(self, request: Request, customer_id: UUID, isbn: str) -> Response:
        """Removing a line that is not in the cart is a no-op."""
        self._service.remove_item(customer_id, isbn)
        return Response(status=status.HTTP_204_NO_CONTENT)
