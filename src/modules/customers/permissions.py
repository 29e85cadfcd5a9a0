"""Object-ownership permission for customer-scoped endpoints."""

from __future__ import annotations

import structlog
from rest_framework.permissions import BasePermission

from modules.customers.repositories.django_repository import CustomerDjangoRepository

logger = structlog.get_logger(__name__)


class IsCustomerOwner(BasePermission):
    """Allow access only to the authenticated user's own ``customer_id``.

    Views routed under ``customers/<customer_id>/`` rely on this to reject
    cross-customer access before any cart or order code runs.  On success the
    resolved customer is cached on ``request.customer``.
    """

    message = "You may only access your own cart and orders."

    def has_permission(self, request, view) -> bool:
        customer = CustomerDjangoRepository().get_by_user(request.user)
        requested = str(view.kwargs.get("customer_id", ""))
        if customer is None or str(customer.id) != requested:
            logger.warning(
                "customer.access_denied",
                user_id=getattr(request.user, "pk", None),
                requested_customer_id=requested,
            )
            return False
        request.customer = customer
        return True
