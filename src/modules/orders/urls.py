"""Checkout and order URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.orders.views import CheckoutView, OrderViewSet

router = DefaultRouter(trailing_slash=True)
router.register(
    r"customers/(?P<customer_id>[0-9a-f-]{36})/orders",
    OrderViewSet,
    basename="customer-order",
)

urlpatterns = [
    path(
        "customers/<uuid:customer_id>/checkout/",
        CheckoutView.as_view(),
        name="checkout",
    ),
    *router.urls,
]
