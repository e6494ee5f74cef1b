"""Statistics API views.

Both responses are cached under the ``estadisticas`` view, which order
mutations invalidate whenever an order is delivered or cancelled.
"""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.repositories.django_repository import MenuItemDjangoRepository
from modules.core.cache import CachedView, get_or_build, view_cache_key
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer
from modules.reports.services import ReportService


class StatisticsViewSet(GenericViewSet):
    """Sales statistics for the admin (staff)."""

    serializer_class = OrderListSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ReportService(
            order_repository=OrderDjangoRepository(),
            menu_item_repository=MenuItemDjangoRepository(),
        )

    def list(self, request: Request) -> Response:
        """GET /api/v1/statistics/"""
        data = get_or_build(
            view_cache_key(CachedView.STATISTICS, "report"),
            lambda: self._service.statistics().model_dump(mode="json"),
        )
        return Response(data)

    @action(detail=False, methods=["get"])
    def cancelled(self, request: Request) -> Response:
        """GET /api/v1/statistics/cancelled/"""
        data = get_or_build(
            view_cache_key(CachedView.STATISTICS, "cancelled"),
            lambda: OrderListSerializer(self._service.cancelled_orders(), many=True).data,
        )
        return Response(data)
