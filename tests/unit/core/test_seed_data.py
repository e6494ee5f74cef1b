from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command

from modules.catalog.models import Category, MenuItem
from modules.delivery.models import DeliveryPerson
from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.unit


def _seed():
    out = StringIO()
    call_command("seed_data", stdout=out)
    return out.getvalue()


def test_seed_creates_demo_data():
    output = _seed()

    assert "Seed completed" in output
    assert Category.objects.count() == 2
    assert MenuItem.objects.alive().count() == 9
    assert MenuItem.objects.alive().filter(available=False).count() == 2
    assert DeliveryPerson.objects.alive().count() == 3
    assert sorted(Order.objects.values_list("status", flat=True)) == sorted(
        [OrderStatus.ENTREGADO, OrderStatus.NUEVO, OrderStatus.PREPARACION, OrderStatus.LISTO]
    )


def test_seeded_orders_are_priced_from_the_menu():
    _seed()

    delivered = Order.objects.get(status=OrderStatus.ENTREGADO)
    assert delivered.total_amount == Decimal("9500.00")
    assert delivered.status_history.first().actor == "seed"

    ready = Order.objects.get(status=OrderStatus.LISTO)
    assert ready.total_amount == Decimal("13600.00")


def test_seed_drivers_can_log_in():
    _seed()
    driver = DeliveryPerson.objects.get(name="Juan")
    assert driver.check_password("123")


def test_seed_is_idempotent():
    _seed()
    output = _seed()

    assert "Skipping orders" in output
    assert Order.objects.count() == 4
    assert MenuItem.objects.alive().count() == 9
