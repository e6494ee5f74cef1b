"""Reporting service: loads orders and catalog, delegates to the aggregator."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog

from modules.orders.constants import OrderStatus
from modules.reports.aggregator import (
    compute_category_revenue,
    compute_daily_revenue,
    compute_sales,
    compute_summary,
    list_cancelled,
)
from modules.reports.dtos import StatisticsReport

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IMenuItemRepository
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class ReportService:
    """Read-only use-cases behind the statistics screen."""

    def __init__(
        self,
        order_repository: IOrderRepository,
        menu_item_repository: IMenuItemRepository,
    ) -> None:
        self._orders = order_repository
        self._menu_items = menu_item_repository

    def statistics(self) -> StatisticsReport:
        delivered = self._orders.list({"status": OrderStatus.ENTREGADO})
        sales = compute_sales(delivered, self._menu_items.list())
        report = StatisticsReport(
            summary=compute_summary(sales),
            daily_revenue=compute_daily_revenue(sales),
            category_revenue=compute_category_revenue(sales),
            sales=sales,
        )
        logger.info(
            "report.statistics_built",
            order_count=len(delivered),
            sale_count=len(sales),
        )
        return report

    def cancelled_orders(self) -> List[Order]:
        return list_cancelled(self._orders.list({"status": OrderStatus.CANCELADO}))
