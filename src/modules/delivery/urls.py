"""Delivery URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.delivery.views import DeliveryPersonViewSet, DriverDeliveryViewSet

router = DefaultRouter(trailing_slash=True)
router.register("delivery-people", DeliveryPersonViewSet, basename="delivery-person")
router.register("deliveries", DriverDeliveryViewSet, basename="delivery")

urlpatterns = router.urls
