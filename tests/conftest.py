from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.catalog.models import Category, MenuItem
from modules.delivery.models import DeliveryPerson
from modules.orders.views import build_order_service

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Cached views must not leak between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def staff_user():
    return User.objects.create_user(
        username="caja", password="testpass123", is_staff=True
    )


@pytest.fixture()
def auth_client(staff_user):
    """APIClient with a force-authenticated staff user."""
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def pizza_category():
    return Category.objects.create(name="Pizza", has_multiple_sizes=True)


@pytest.fixture()
def empanada_category():
    return Category.objects.create(
        name="Empanada", has_multiple_sizes=True, sold_by_dozen=True
    )


@pytest.fixture()
def drinks_category():
    return Category.objects.create(name="Bebida", has_multiple_sizes=False)


@pytest.fixture()
def muzzarella(pizza_category):
    return MenuItem.objects.create(
        name="Muzzarella",
        ingredients="Salsa de tomate, muzzarella, aceitunas",
        category="Pizza",
        price_full=Decimal("5800.00"),
        price_half=Decimal("3200.00"),
    )


@pytest.fixture()
def fugazzeta(pizza_category):
    """Whole-only pizza that is currently unavailable."""
    return MenuItem.objects.create(
        name="Fugazzeta",
        category="Pizza",
        price_full=Decimal("6200.00"),
        available=False,
    )


@pytest.fixture()
def empanada_jyq(empanada_category):
    return MenuItem.objects.create(
        name="Empanada de Jamón y Queso",
        category="Empanada",
        price_full=Decimal("6000.00"),
        price_half=Decimal("3100.00"),
        price_unit=Decimal("550.00"),
    )


@pytest.fixture()
def gaseosa(drinks_category):
    return MenuItem.objects.create(
        name="Gaseosa",
        category="Bebida",
        price_full=Decimal("2500.00"),
        measurement_unit="1.5L",
    )


# ---------------------------------------------------------------------------
# Drivers
# ---------------------------------------------------------------------------


def _driver(name: str) -> DeliveryPerson:
    driver = DeliveryPerson(name=name)
    driver.set_password("123")
    driver.save()
    return driver


@pytest.fixture()
def driver():
    return _driver("Juan")


@pytest.fixture()
def other_driver():
    return _driver("Maria")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def pickup_payload(muzzarella):
    return {
        "customer_name": "Laura Gomez",
        "customer_phone": "1166778899",
        "delivery_type": "retiro",
        "items": [{"menu_item_id": str(muzzarella.id), "size": "entera", "quantity": 1}],
    }


@pytest.fixture()
def delivery_payload(muzzarella, empanada_jyq, driver):
    return {
        "customer_name": "Lucia Fernandez",
        "customer_phone": "1198765432",
        "delivery_type": "envio",
        "address": "Calle Falsa 123",
        "delivery_person_id": str(driver.id),
        "items": [
            {"menu_item_id": str(muzzarella.id), "size": "entera", "quantity": 1},
            {"menu_item_id": str(empanada_jyq.id), "size": "6", "quantity": 2},
        ],
    }


@pytest.fixture()
def make_order(order_service):
    """Create an order through the service and return it."""

    def _make(payload):
        return order_service.create_order(payload).order

    return _make
