"""Unit tests for OrderValidator.

Covers:
- Total and estimated time of a valid order.
- Shape errors reported per field.
- Delivery rules (address, driver) vs. pickup.
- Line errors collected for every offending line.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from modules.catalog.models import MenuItem
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    MenuItemDjangoRepository,
)
from modules.delivery.repositories.django_repository import (
    DeliveryPersonDjangoRepository,
)
from modules.orders.constants import MAX_AMOUNT, PICKUP_ADDRESS
from modules.orders.exceptions import OrderValidationFailed
from modules.orders.policies import DelayPolicy
from modules.orders.validation import OrderValidator, estimated_time, order_total

pytestmark = pytest.mark.unit

BUENOS_AIRES = ZoneInfo("America/Argentina/Buenos_Aires")


@pytest.fixture()
def validator():
    return OrderValidator(
        menu_item_repository=MenuItemDjangoRepository(),
        category_repository=CategoryDjangoRepository(),
        delivery_person_repository=DeliveryPersonDjangoRepository(),
        delay_policy=DelayPolicy(default_minutes=40, per_delivery_type={"retiro": 30}),
    )


class TestValidOrders:
    def test_total_is_sum_of_lines(self, validator, delivery_payload):
        priced = validator.validate_and_price(delivery_payload)

        assert priced.total_amount == Decimal("12000.00")
        assert [(line.name, line.size, line.unit_price) for line in priced.items] == [
            ("Muzzarella", "entera", Decimal("5800.00")),
            ("Empanada de Jamón y Queso", "6", Decimal("3100.00")),
        ]

    def test_pickup_needs_no_address(self, validator, pickup_payload):
        priced = validator.validate_and_price(pickup_payload)

        assert priced.address == PICKUP_ADDRESS
        assert priced.delivery_person_id is None
        assert priced.delay == 30

    def test_pickup_ignores_given_address_and_driver(self, validator, pickup_payload, driver):
        payload = {
            **pickup_payload,
            "address": "Somewhere 1",
            "delivery_person_id": str(driver.id),
        }
        priced = validator.validate_and_price(payload)
        assert priced.address == PICKUP_ADDRESS
        assert priced.delivery_person_id is None

    def test_estimated_time_is_local_now_plus_delay(self, validator, pickup_payload):
        now = datetime(2024, 5, 1, 23, 50, tzinfo=BUENOS_AIRES)
        priced = validator.validate_and_price({**pickup_payload, "delay": 25}, now=now)
        assert priced.delay == 25
        assert priced.estimated_time == "00:15"

    def test_zero_delay_is_kept(self, validator, pickup_payload):
        priced = validator.validate_and_price({**pickup_payload, "delay": 0})
        assert priced.delay == 0

    def test_delivery_uses_default_delay(self, validator, delivery_payload):
        assert validator.validate_and_price(delivery_payload).delay == 40

    def test_size_is_normalized(self, validator, pickup_payload, muzzarella):
        payload = {
            **pickup_payload,
            "items": [{"menu_item_id": str(muzzarella.id), "size": " MEDIA ", "quantity": 2}],
        }
        priced = validator.validate_and_price(payload)
        assert priced.items[0].size == "media"
        assert priced.total_amount == Decimal("6400.00")

    def test_single_size_item(self, validator, pickup_payload, gaseosa):
        payload = {
            **pickup_payload,
            "items": [{"menu_item_id": str(gaseosa.id), "size": "1.5L", "quantity": 3}],
        }
        assert validator.validate_and_price(payload).total_amount == Decimal("7500.00")


class TestShapeErrors:
    def test_missing_fields(self, validator):
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price({"delivery_type": "retiro"})
        assert {"customer_name", "customer_phone", "items"} <= set(exc.value.errors)

    def test_bad_phone(self, validator, pickup_payload):
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price({**pickup_payload, "customer_phone": "12ab"})
        assert "customer_phone" in exc.value.errors

    def test_phone_separators_allowed(self, validator, pickup_payload):
        priced = validator.validate_and_price(
            {**pickup_payload, "customer_phone": "(11) 6677-8899"}
        )
        assert priced.customer_phone == "(11) 6677-8899"

    def test_empty_cart(self, validator, pickup_payload):
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price({**pickup_payload, "items": []})
        assert exc.value.errors["items"] == ["Order must have at least one item."]

    def test_unknown_delivery_type(self, validator, pickup_payload):
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price({**pickup_payload, "delivery_type": "dron"})
        assert "delivery_type" in exc.value.errors

    def test_negative_delay(self, validator, pickup_payload):
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price({**pickup_payload, "delay": -5})
        assert "delay" in exc.value.errors

    def test_line_shape_error_path(self, validator, pickup_payload, muzzarella):
        payload = {
            **pickup_payload,
            "items": [{"menu_item_id": str(muzzarella.id), "quantity": 1}],
        }
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(payload)
        assert "items.0.size" in exc.value.errors


class TestDeliveryRules:
    def test_delivery_without_address_names_address(self, validator, delivery_payload):
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price({**delivery_payload, "address": "  "})
        assert list(exc.value.errors) == ["address"]

    def test_same_request_as_pickup_succeeds(self, validator, delivery_payload):
        payload = {**delivery_payload, "address": "", "delivery_type": "retiro"}
        assert validator.validate_and_price(payload).address == PICKUP_ADDRESS

    def test_delivery_without_driver(self, validator, delivery_payload):
        payload = {k: v for k, v in delivery_payload.items() if k != "delivery_person_id"}
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(payload)
        assert "delivery_person_id" in exc.value.errors

    def test_delivery_with_unknown_driver(self, validator, delivery_payload):
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(
                {**delivery_payload, "delivery_person_id": str(uuid4())}
            )
        assert "delivery_person_id" in exc.value.errors


class TestLineErrors:
    def test_all_bad_lines_are_reported(self, validator, pickup_payload, muzzarella, fugazzeta):
        payload = {
            **pickup_payload,
            "items": [
                {"menu_item_id": str(muzzarella.id), "size": "entera", "quantity": 1},
                {"menu_item_id": str(uuid4()), "size": "entera", "quantity": 1},
                {"menu_item_id": str(fugazzeta.id), "size": "entera", "quantity": 1},
                {"menu_item_id": str(muzzarella.id), "size": "12", "quantity": 1},
                {"menu_item_id": str(muzzarella.id), "size": "entera", "quantity": 0},
            ],
        }
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(payload)

        errors = exc.value.errors
        assert set(errors) == {"items.1", "items.2", "items.3", "items.4"}
        assert "not found" in errors["items.1"][0]
        assert "not available" in errors["items.2"][0]

    def test_deleted_item_is_not_found(self, validator, pickup_payload, muzzarella):
        muzzarella.delete()
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(pickup_payload)
        assert "items.0" in exc.value.errors

    def test_delivery_and_line_errors_together(self, validator, delivery_payload):
        payload = {
            **delivery_payload,
            "address": "",
            "items": [{"menu_item_id": "nope", "size": "entera", "quantity": 1}],
        }
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(payload)
        assert {"address", "items.0"} <= set(exc.value.errors)


class TestAmountLimits:
    @pytest.fixture()
    def banquet(self, pizza_category):
        return MenuItem.objects.create(
            name="Banquete",
            category="Pizza",
            price_full=Decimal("99999999.99"),
            price_half=Decimal("60000000.00"),
        )

    def _lines(self, pickup_payload, *lines):
        return {
            **pickup_payload,
            "items": [
                {"menu_item_id": str(item.id), "size": size, "quantity": quantity}
                for item, size, quantity in lines
            ],
        }

    def test_oversized_quantity_is_a_line_error(self, validator, pickup_payload, muzzarella):
        payload = self._lines(pickup_payload, (muzzarella, "entera", 100000))
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(payload)
        assert set(exc.value.errors) == {"items.0"}

    def test_line_subtotal_over_limit(self, validator, pickup_payload, banquet):
        payload = self._lines(pickup_payload, (banquet, "entera", 2))
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(payload)
        assert "Subtotal" in exc.value.errors["items.0"][0]

    def test_order_total_over_limit(self, validator, pickup_payload, banquet):
        payload = self._lines(
            pickup_payload, (banquet, "entera", 1), (banquet, "media", 1)
        )
        with pytest.raises(OrderValidationFailed) as exc:
            validator.validate_and_price(payload)
        assert set(exc.value.errors) == {"total_amount"}

    def test_total_at_limit_is_accepted(self, validator, pickup_payload, banquet):
        priced = validator.validate_and_price(
            self._lines(pickup_payload, (banquet, "entera", 1))
        )
        assert priced.total_amount == MAX_AMOUNT


class TestHelpers:
    def test_order_total_rounds_half_up(self, validator, pickup_payload):
        priced = validator.validate_and_price(pickup_payload)
        line = priced.items[0].model_copy(update={"unit_price": Decimal("0.125")})
        assert order_total([line]) == Decimal("0.13")

    def test_estimated_time_format(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=BUENOS_AIRES)
        assert estimated_time(now, 45) == "12:45"
