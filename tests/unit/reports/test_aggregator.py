"""Unit tests for the reporting aggregator.

Orders are built through the service and moved with the repository so
the aggregator sees real model instances.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from modules.catalog.models import MenuItem
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.reports.aggregator import (
    compute_category_revenue,
    compute_daily_revenue,
    compute_sales,
    compute_summary,
    list_cancelled,
    product_label,
)
from modules.reports.dtos import Sale

pytestmark = pytest.mark.unit

BUENOS_AIRES = ZoneInfo("America/Argentina/Buenos_Aires")


def _line(item, size="entera", quantity=1):
    return {"menu_item_id": str(item.id), "size": size, "quantity": quantity}


@pytest.fixture()
def place(make_order, pickup_payload):
    """Create an order with *lines*, force its status and creation time."""

    def _place(lines, status=OrderStatus.ENTREGADO, created_at=None):
        order = make_order({**pickup_payload, "items": lines})
        updates = {"status": status}
        if created_at is not None:
            updates["created_at"] = created_at
        Order.objects.filter(id=order.id).update(**updates)
        return Order.objects.prefetch_related("items").get(id=order.id)

    return _place


def _sale(product, quantity, total, category="Pizza", when=None):
    return Sale(
        id=f"x-{product}",
        date=when or datetime(2024, 5, 1, 12, tzinfo=BUENOS_AIRES),
        product_name=product,
        category=category,
        quantity=quantity,
        total_price=Decimal(total),
    )


class TestComputeSales:
    def test_only_delivered_orders(self, place, muzzarella):
        delivered = place([_line(muzzarella)])
        place([_line(muzzarella)], status=OrderStatus.LISTO)
        place([_line(muzzarella)], status=OrderStatus.CANCELADO)

        sales = compute_sales(Order.objects.all(), MenuItem.objects.alive())

        assert [s.id for s in sales] == [f"{delivered.id}-0"]
        assert sales[0].product_name == "Muzzarella (Entera)"
        assert sales[0].category == "Pizza"

    def test_line_per_item_with_total(self, place, muzzarella, empanada_jyq):
        place([_line(muzzarella), _line(empanada_jyq, "6", 2)])

        sales = compute_sales(Order.objects.all(), MenuItem.objects.alive())

        assert [(s.product_name, s.quantity, s.total_price) for s in sales] == [
            ("Muzzarella (Entera)", 1, Decimal("5800.00")),
            ("Empanada de Jamón y Queso (6)", 2, Decimal("6200.00")),
        ]

    def test_deleted_menu_item_lines_are_dropped(self, place, muzzarella, empanada_jyq):
        place([_line(muzzarella), _line(empanada_jyq, "6", 1)])
        empanada_jyq.delete()

        sales = compute_sales(Order.objects.all(), MenuItem.objects.alive())
        assert [s.product_name for s in sales] == ["Muzzarella (Entera)"]

    def test_newest_first(self, place, muzzarella):
        now = datetime(2024, 5, 2, 20, tzinfo=BUENOS_AIRES)
        older = place([_line(muzzarella)], created_at=now - timedelta(days=1))
        newer = place([_line(muzzarella)], created_at=now)

        sales = compute_sales(Order.objects.all(), MenuItem.objects.alive())
        assert [s.id for s in sales] == [f"{newer.id}-0", f"{older.id}-0"]


class TestSummary:
    def test_revenue_units_and_best_seller(self, place, muzzarella):
        place([_line(muzzarella, quantity=2)])
        place([_line(muzzarella), _line(muzzarella, "media")])

        summary = compute_summary(
            compute_sales(Order.objects.all(), MenuItem.objects.alive())
        )

        assert summary.total_revenue == Decimal("20600.00")
        assert summary.total_units_sold == 4
        assert summary.best_seller == "Muzzarella (Entera)"

    def test_empty(self):
        summary = compute_summary([])
        assert summary.total_revenue == Decimal("0")
        assert summary.total_units_sold == 0
        assert summary.best_seller is None

    def test_tie_goes_to_first_seen(self):
        sales = [_sale("Napolitana (Entera)", 2, "12400"), _sale("Muzzarella (Entera)", 2, "11600")]
        assert compute_summary(sales).best_seller == "Napolitana (Entera)"


class TestBreakdowns:
    def test_daily_revenue_uses_local_day_ascending(self):
        late_night = datetime(2024, 5, 2, 2, 30, tzinfo=ZoneInfo("UTC"))  # 23:30 on May 1st locally
        sales = [
            _sale("A", 1, "100", when=datetime(2024, 5, 2, 12, tzinfo=BUENOS_AIRES)),
            _sale("B", 1, "50", when=late_night),
            _sale("C", 1, "25", when=datetime(2024, 5, 1, 9, tzinfo=BUENOS_AIRES)),
        ]

        daily = compute_daily_revenue(sales)

        assert [(d.day.isoformat(), d.revenue) for d in daily] == [
            ("2024-05-01", Decimal("75")),
            ("2024-05-02", Decimal("100")),
        ]

    def test_category_revenue_descending(self):
        sales = [
            _sale("A", 1, "100", category="Empanada"),
            _sale("B", 1, "300", category="Pizza"),
            _sale("C", 1, "100", category="Bebida"),
        ]
        ranked = compute_category_revenue(sales)
        assert [(c.category, c.revenue) for c in ranked] == [
            ("Pizza", Decimal("300")),
            ("Bebida", Decimal("100")),
            ("Empanada", Decimal("100")),
        ]

    def test_list_cancelled_most_recent_first(self, place, muzzarella):
        now = datetime(2024, 5, 2, 20, tzinfo=BUENOS_AIRES)
        old = place([_line(muzzarella)], OrderStatus.CANCELADO, now - timedelta(hours=2))
        new = place([_line(muzzarella)], OrderStatus.CANCELADO, now)
        place([_line(muzzarella)], OrderStatus.NUEVO)

        assert [o.id for o in list_cancelled(Order.objects.all())] == [new.id, old.id]


def test_product_label():
    assert product_label("Muzzarella", "media") == "Muzzarella (Media)"
