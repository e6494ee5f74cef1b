from __future__ import annotations

import pytest

from modules.orders.constants import DeliveryType
from modules.orders.policies import DelayPolicy

pytestmark = pytest.mark.unit


def test_defaults_from_settings(settings):
    settings.ORDER_DELAY_PICKUP_MINUTES = 30
    settings.ORDER_DELAY_DELIVERY_MINUTES = 45
    settings.ORDER_DELAY_DEFAULT_MINUTES = 40

    policy = DelayPolicy.from_settings()

    assert policy.minutes_for(DeliveryType.RETIRO) == 30
    assert policy.minutes_for(DeliveryType.ENVIO) == 45


def test_flat_default_when_type_has_no_value():
    policy = DelayPolicy(default_minutes=40)
    assert policy.minutes_for(DeliveryType.RETIRO) == 40
    assert policy.minutes_for(DeliveryType.ENVIO) == 40


def test_explicit_request_wins_even_when_zero():
    policy = DelayPolicy(default_minutes=40, per_delivery_type={DeliveryType.ENVIO: 45})
    assert policy.minutes_for(DeliveryType.ENVIO, 10) == 10
    assert policy.minutes_for(DeliveryType.ENVIO, 0) == 0
