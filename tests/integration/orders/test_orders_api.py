"""Integration tests for the Orders API.

Covers:
- POST creates (201) with priced snapshot; validation errors are 400.
- Idempotency-Key replays return 200 with the same order.
- Kitchen queue, list filters and detail.
- Status transitions (advance / PATCH / cancel / reactivate) and their
  error codes, including the 409 for a concurrent change.
- Auth required.
"""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = [pytest.mark.integration, pytest.mark.django_db]

ORDERS_URL = "/api/v1/orders/"


def _detail(order_id, action=None):
    url = f"{ORDERS_URL}{order_id}/"
    return f"{url}{action}/" if action else url


@pytest.fixture()
def created(auth_client, pickup_payload):
    response = auth_client.post(ORDERS_URL, pickup_payload, format="json")
    assert response.status_code == 201, response.json()
    return response.json()


class TestCreate:
    def test_create_returns_priced_order(self, auth_client, delivery_payload):
        response = auth_client.post(ORDERS_URL, delivery_payload, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == OrderStatus.NUEVO
        assert data["total_amount"] == "12000.00"
        assert data["estimated_time"]
        assert [(i["name"], i["size"], i["unit_price"]) for i in data["items"]] == [
            ("Muzzarella", "entera", "5800.00"),
            ("Empanada de Jamón y Queso", "6", "3100.00"),
        ]

        fetched = auth_client.get(_detail(data["id"])).json()
        assert fetched["items"] == data["items"]
        assert fetched["status_history"][0]["actor"] == "caja"

    def test_validation_errors(self, auth_client, delivery_payload):
        response = auth_client.post(
            ORDERS_URL, {**delivery_payload, "address": ""}, format="json"
        )
        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Invalid order."
        assert list(body["errors"]) == ["address"]
        assert Order.objects.count() == 0

    def test_huge_quantity_is_rejected(self, auth_client, pickup_payload, muzzarella):
        payload = {
            **pickup_payload,
            "items": [
                {"menu_item_id": str(muzzarella.id), "size": "entera", "quantity": 100000}
            ],
        }
        response = auth_client.post(ORDERS_URL, payload, format="json")

        assert response.status_code == 400
        assert list(response.json()["errors"]) == ["items.0"]
        assert Order.objects.count() == 0

    def test_non_object_body(self, auth_client):
        response = auth_client.post(ORDERS_URL, [1, 2], format="json")
        assert response.status_code == 400

    def test_idempotency_key(self, auth_client, pickup_payload):
        headers = {"HTTP_IDEMPOTENCY_KEY": "caja-0001"}
        first = auth_client.post(ORDERS_URL, pickup_payload, format="json", **headers)
        replays = [
            auth_client.post(ORDERS_URL, pickup_payload, format="json", **headers)
            for _ in range(2)
        ]

        assert first.status_code == 201
        assert [r.status_code for r in replays] == [200, 200]
        assert {r.json()["id"] for r in replays} == {first.json()["id"]}
        assert Order.objects.count() == 1

    def test_requires_authentication(self, api_client, pickup_payload):
        response = api_client.post(ORDERS_URL, pickup_payload, format="json")
        assert response.status_code == 401


class TestRead:
    def test_list_paginated_and_filtered(self, auth_client, created, pickup_payload):
        auth_client.post(_detail(created["id"], "cancel"))
        auth_client.post(ORDERS_URL, pickup_payload, format="json")

        everything = auth_client.get(ORDERS_URL).json()
        assert everything["count"] == 2

        cancelled = auth_client.get(ORDERS_URL, {"status": "cancelado"}).json()
        assert [o["id"] for o in cancelled["results"]] == [created["id"]]

    def test_kitchen_queue(self, auth_client, created, pickup_payload):
        second = auth_client.post(ORDERS_URL, pickup_payload, format="json").json()
        auth_client.post(_detail(created["id"], "advance"))

        queue = auth_client.get(f"{ORDERS_URL}kitchen/").json()
        assert [o["id"] for o in queue] == [second["id"], created["id"]]

    def test_detail_not_found(self, auth_client):
        assert auth_client.get(_detail(uuid4())).status_code == 404


class TestTransitions:
    def test_advance_through_lifecycle(self, auth_client, created):
        statuses = [
            auth_client.post(_detail(created["id"], "advance")).json()["status"]
            for _ in range(3)
        ]
        assert statuses == ["preparacion", "listo", "entregado"]

        response = auth_client.post(_detail(created["id"], "advance"))
        assert response.status_code == 400

    def test_patch_status(self, auth_client, created):
        response = auth_client.patch(
            _detail(created["id"]),
            {"status": "preparacion", "notes": "al horno"},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["status_history"][0]["notes"] == "al horno"

    def test_patch_skip_rejected(self, auth_client, created):
        response = auth_client.patch(
            _detail(created["id"]), {"status": "entregado"}, format="json"
        )
        assert response.status_code == 400

    def test_patch_unknown_status(self, auth_client, created):
        response = auth_client.patch(
            _detail(created["id"]), {"status": "perdido"}, format="json"
        )
        assert response.status_code == 400
        assert "status" in response.json()["errors"]

    def test_cancel_and_reactivate(self, auth_client, created):
        cancelled = auth_client.post(
            _detail(created["id"], "cancel"), {"notes": "sin stock"}, format="json"
        )
        assert cancelled.json()["status"] == "cancelado"

        reactivated = auth_client.post(_detail(created["id"], "reactivate")).json()
        assert reactivated["status"] == "nuevo"
        for field in ("items", "total_amount", "created_at", "estimated_time"):
            assert reactivated[field] == created[field]

    def test_reactivate_requires_cancelled(self, auth_client, created):
        assert auth_client.post(_detail(created["id"], "reactivate")).status_code == 400

    def test_unknown_order(self, auth_client):
        assert auth_client.post(_detail(uuid4(), "advance")).status_code == 404

    def test_concurrent_change_is_409(self, auth_client, created):
        with patch.object(OrderDjangoRepository, "set_status", return_value=False):
            response = auth_client.post(_detail(created["id"], "advance"))
        assert response.status_code == 409
        assert Order.objects.get(id=created["id"]).status == OrderStatus.NUEVO


class TestCacheInvalidation:
    def test_kitchen_refreshes_after_commit(
        self, auth_client, created, django_capture_on_commit_callbacks
    ):
        kitchen_url = f"{ORDERS_URL}kitchen/"
        assert len(auth_client.get(kitchen_url).json()) == 1

        with django_capture_on_commit_callbacks(execute=True):
            auth_client.post(_detail(created["id"], "cancel"))

        assert auth_client.get(kitchen_url).json() == []

    def test_kitchen_is_served_from_cache(self, auth_client, created):
        kitchen_url = f"{ORDERS_URL}kitchen/"
        assert len(auth_client.get(kitchen_url).json()) == 1

        # Without a commit the invalidation never runs.
        Order.objects.filter(id=created["id"]).update(status=OrderStatus.CANCELADO)
        assert len(auth_client.get(kitchen_url).json()) == 1
