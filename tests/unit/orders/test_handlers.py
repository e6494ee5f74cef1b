"""Unit tests for Orders event handlers and in-memory bus."""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

import pytest

from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderReactivated,
    OrderStatusChanged,
)
from modules.orders.handlers import (
    OrderCancelledHandler,
    OrderCreatedHandler,
    OrderReactivatedHandler,
    OrderStatusChangedHandler,
)
from shared.infrastructure.bus import InMemoryEventBus, event_bus

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("handler", "event", "log_event"),
    [
        (OrderCreatedHandler(), OrderCreated, "order.event.created"),
        (OrderCancelledHandler(), OrderCancelled, "order.event.cancelled"),
        (OrderReactivatedHandler(), OrderReactivated, "order.event.reactivated"),
        (OrderStatusChangedHandler(), OrderStatusChanged, "order.event.status_changed"),
    ],
)
def test_handlers_log(handler, event, log_event):
    aggregate_id = uuid4()
    with patch("modules.orders.handlers.logger") as logger:
        handler.handle(event(aggregate_id=aggregate_id, payload={"old_status": "nuevo"}))

    args, kwargs = logger.info.call_args
    assert args == (log_event,)
    assert kwargs["order_id"] == str(aggregate_id)


def test_event_name_is_class_name():
    event = OrderCancelled(aggregate_id=uuid4())
    assert event.event_name == "OrderCancelled"


def test_in_memory_event_bus_routes_events():
    bus = InMemoryEventBus()
    received = []

    class Recorder:
        def handle(self, event):
            received.append(event)

    recorder = Recorder()
    bus.subscribe(OrderCreated, recorder)
    bus.subscribe(OrderCreated, recorder)

    created = OrderCreated(aggregate_id=uuid4())
    bus.publish_all([created, OrderCancelled(aggregate_id=uuid4())])

    assert received == [created]


def test_order_handlers_subscribed_at_startup():
    handlers = event_bus._handlers
    for event_class in (OrderCreated, OrderCancelled, OrderReactivated, OrderStatusChanged):
        assert handlers.get(event_class), event_class.__name__
