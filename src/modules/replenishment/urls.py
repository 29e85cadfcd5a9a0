"""Replenishment URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.replenishment.views import ReplenishmentRequestViewSet

router = DefaultRouter(trailing_slash=True)
router.register(
    "replenishment-requests",
    ReplenishmentRequestViewSet,
    basename="replenishment-request",
)

urlpatterns = router.urls
