"""Reporting aggregator.

Pure projections over orders and the current catalog; nothing here
reads or writes the database by itself.

- Only ``entregado`` orders produce sales, one per line item.
- Lines whose menu item no longer exists are dropped.
- Orders are walked newest first; the best seller tie-break (first
  product to reach the top quantity) depends on that order.
- Days are bucketed in the display time zone.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List

from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.reports.dtos import CategoryRevenue, DailyRevenue, Sale, SalesSummary

if TYPE_CHECKING:
    from modules.catalog.models import MenuItem
    from modules.orders.models import Order

ZERO = Decimal("0")


def product_label(name: str, size: str) -> str:
    """``"Muzzarella (Entera)"``."""
    return f"{name} ({size.capitalize()})"


def compute_sales(orders: Iterable[Order], menu_items: Iterable[MenuItem]) -> List[Sale]:
    """Project delivered orders into sales, newest first."""
    catalog: Dict[str, MenuItem] = {str(item.id): item for item in menu_items}
    delivered = sorted(
        (o for o in orders if o.status == OrderStatus.ENTREGADO),
        key=lambda o: o.created_at,
        reverse=True,
    )

    sales: List[Sale] = []
    for order in delivered:
        for index, line in enumerate(order.items.all()):
            menu_item = catalog.get(line.menu_item_id)
            if menu_item is None:
                continue
            sales.append(
                Sale(
                    id=f"{order.id}-{index}",
                    date=order.created_at,
                    product_name=product_label(line.name, line.size),
                    category=menu_item.category,
                    quantity=line.quantity,
                    total_price=line.unit_price * line.quantity,
                )
            )
    return sales


def compute_summary(sales: Iterable[Sale]) -> SalesSummary:
    total_revenue = ZERO
    total_units = 0
    units_by_product: Dict[str, int] = {}
    for sale in sales:
        total_revenue += sale.total_price
        total_units += sale.quantity
        units_by_product[sale.product_name] = (
            units_by_product.get(sale.product_name, 0) + sale.quantity
        )

    best_seller = None
    best_units = 0
    # Dicts keep insertion order, so ties go to the first product seen.
    for product, units in units_by_product.items():
        if units > best_units:
            best_seller, best_units = product, units

    return SalesSummary(
        total_revenue=total_revenue,
        total_units_sold=total_units,
        best_seller=best_seller,
    )


def compute_daily_revenue(sales: Iterable[Sale]) -> List[DailyRevenue]:
    """Revenue per local calendar day, oldest day first."""
    by_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for sale in sales:
        by_day[timezone.localtime(sale.date).date()] += sale.total_price
    return [DailyRevenue(day=day, revenue=by_day[day]) for day in sorted(by_day)]


def compute_category_revenue(sales: Iterable[Sale]) -> List[CategoryRevenue]:
    """Revenue per category, highest first (ties by name)."""
    by_category: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for sale in sales:
        by_category[sale.category] += sale.total_price
    ranked = sorted(by_category.items(), key=lambda kv: (-kv[1], kv[0]))
    return [CategoryRevenue(category=name, revenue=revenue) for name, revenue in ranked]


def list_cancelled(orders: Iterable[Order]) -> List[Order]:
    """Cancelled orders, most recent first."""
    return sorted(
        (o for o in orders if o.status == OrderStatus.CANCELADO),
        key=lambda o: o.created_at,
        reverse=True,
    )
