"""Customer URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.customers.views import CurrentCustomerView

urlpatterns = [
    path("me", CurrentCustomerView.as_view(), name="current_customer"),
]
