"""Checkout and order-history API views.

Exposes ``CheckoutService`` and ``OrderQueryService`` over HTTP.  Checkout
errors are translated by their ``kind``; the view never swallows generic
exceptions.
"""

from __future__ import annotations

from uuid import UUID

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.catalog.repositories.django_repository import InventoryDjangoRepository
from modules.customers.permissions import IsCustomerOwner
from modules.orders.dtos import CheckoutDTO
from modules.orders.exceptions import (
    BookUnavailable,
    CheckoutError,
    EmptyCart,
    InsufficientStock,
    LockTimeout,
    OrderNotFound,
    PaymentValidation,
    PersistenceFailure,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CheckoutResultSerializer,
    CheckoutSerializer,
    OrderSerializer,
)
from modules.orders.services import CheckoutService, OrderQueryService
from modules.replenishment.repositories.django_repository import (
    ReplenishmentDjangoRepository,
)
from modules.replenishment.trigger import ReplenishmentTrigger

CHECKOUT_ERROR_STATUS = {
    PaymentValidation: status.HTTP_400_BAD_REQUEST,
    EmptyCart: status.HTTP_400_BAD_REQUEST,
    BookUnavailable: status.HTTP_404_NOT_FOUND,
    InsufficientStock: status.HTTP_409_CONFLICT,
    LockTimeout: status.HTTP_409_CONFLICT,
    PersistenceFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def checkout_error_response(exc: CheckoutError) -> Response:
    body = {"detail": str(exc), "code": exc.kind}
    if isinstance(exc, InsufficientStock):
        body.update(isbn=exc.isbn, requested=exc.requested, available=exc.available)
    elif isinstance(exc, BookUnavailable):
        body["isbns"] = exc.isbns
    return Response(
        body,
        status=CHECKOUT_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
    )


class CheckoutView(APIView):
    """POST /api/v1/customers/{customer_id}/checkout/"""

    permission_classes = [IsAuthenticated, IsCustomerOwner]
    throttle_scope = "checkout"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CheckoutService(
            cart_repository=CartDjangoRepository(),
            inventory_repository=InventoryDjangoRepository(),
            order_repository=OrderDjangoRepository(),
            replenishment_trigger=ReplenishmentTrigger(ReplenishmentDjangoRepository()),
        )

    @extend_schema(request=CheckoutSerializer, responses={201: CheckoutResultSerializer})
    def post(self, request: Request, customer_id: UUID) -> Response:
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CheckoutDTO(**serializer.validated_data)

        try:
            result = self._service.checkout(customer_id, dto)
        except CheckoutError as exc:
            return checkout_error_response(exc)

        out = CheckoutResultSerializer(result.model_dump())
        return Response(out.data, status=status.HTTP_201_CREATED)


class OrderViewSet(ListModelMixin, GenericViewSet):
    """GET /api/v1/customers/{customer_id}/orders/[{pk}/]

    Order history, newest first.  Orders are read-only.
    """

    permission_classes = [IsAuthenticated, IsCustomerOwner]
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend]
    queryset = Order.objects.all()
    serializer_class = OrderSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderQueryService(order_repository=OrderDjangoRepository())

    def get_queryset(self):
        return self._service.list_orders(self.kwargs["customer_id"])

    def retrieve(
        self, request: Request, customer_id: str, pk: str | None = None
    ) -> Response:
        try:
            order = self._service.get_order(customer_id, pk)
        except OrderNotFound as exc:
            return Response(
                {"detail": str(exc), "code": "not_found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(OrderSerializer(order).data)
