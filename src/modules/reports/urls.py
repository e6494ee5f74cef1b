"""Reports URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.reports.views import StatisticsViewSet

router = DefaultRouter(trailing_slash=True)
router.register("statistics", StatisticsViewSet, basename="statistics")

urlpatterns = router.urls
