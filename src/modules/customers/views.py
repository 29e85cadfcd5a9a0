"""Customer API views."""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer


class CurrentCustomerView(APIView):
    """GET /api/v1/me: the customer profile of the bearer token's user.

    Clients use the returned ``id`` to build ``customers/<id>/…`` URLs.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        customer = CustomerDjangoRepository().get_by_user(request.user)
        if customer is None:
            return Response(
                {"detail": "No customer profile for this user."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(CustomerSerializer(customer).data)
