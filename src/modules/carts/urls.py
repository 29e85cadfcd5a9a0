"""Cart URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.carts.views import CartLineView, CartView

urlpatterns = [
    path("customers/<uuid:customer_id>/cart/", CartView.as_view(), name="cart"),
    path(
        "customers/<uuid:customer_id>/cart/<str:isbn>/",
        CartLineView.as_view(),
        name="cart-line",
    ),
]
