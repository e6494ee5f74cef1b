"""Integration tests for the catalog endpoints (categories, menu, stock)."""

from __future__ import annotations

import pytest

from modules.catalog.models import MenuItem

pytestmark = [pytest.mark.integration, pytest.mark.django_db]

CATEGORIES_URL = "/api/v1/categories/"
MENU_URL = "/api/v1/menu-items/"
STOCK_URL = f"{MENU_URL}stock/"


class TestCategories:
    def test_create_and_list(self, auth_client):
        response = auth_client.post(
            CATEGORIES_URL,
            {"name": "Empanada", "has_multiple_sizes": True, "sold_by_dozen": True},
            format="json",
        )
        assert response.status_code == 201
        assert [c["name"] for c in auth_client.get(CATEGORIES_URL).json()] == ["Empanada"]

    def test_duplicate_is_conflict(self, auth_client, pizza_category):
        response = auth_client.post(CATEGORIES_URL, {"name": "PIZZA"}, format="json")
        assert response.status_code == 409

    def test_blank_name(self, auth_client):
        response = auth_client.post(CATEGORIES_URL, {"name": "  "}, format="json")
        assert response.status_code == 400
        assert "name" in response.json()["errors"]

    def test_delete_in_use_is_conflict(self, auth_client, pizza_category, muzzarella):
        response = auth_client.delete(f"{CATEGORIES_URL}{pizza_category.id}/")
        assert response.status_code == 409


class TestMenuItems:
    def test_create(self, auth_client, pizza_category):
        response = auth_client.post(
            MENU_URL,
            {
                "name": "Napolitana",
                "category": "Pizza",
                "price_full": "6200",
                "price_half": "3500",
            },
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["price_half"] == "3500.00"

    def test_create_rejects_zero_price(self, auth_client, pizza_category):
        response = auth_client.post(
            MENU_URL, {"name": "Gratis", "category": "Pizza", "price_full": "0"}, format="json"
        )
        assert response.status_code == 400
        assert "price_full" in response.json()["errors"]

    def test_create_unknown_category(self, auth_client):
        response = auth_client.post(
            MENU_URL, {"name": "Sushi", "category": "Japonesa", "price_full": "10"}, format="json"
        )
        assert response.status_code == 400
        assert "category" in response.json()["errors"]

    def test_list_filter_and_delete(self, auth_client, muzzarella, gaseosa):
        drinks = auth_client.get(MENU_URL, {"category": "Bebida"}).json()
        assert [i["name"] for i in drinks["results"]] == ["Gaseosa"]

        assert auth_client.delete(f"{MENU_URL}{gaseosa.id}/").status_code == 204
        assert auth_client.get(f"{MENU_URL}{gaseosa.id}/").status_code == 404
        assert MenuItem.objects.filter(id=gaseosa.id).exists()

    def test_menu_refreshes_after_edit(
        self, auth_client, muzzarella, django_capture_on_commit_callbacks
    ):
        assert auth_client.get(MENU_URL).json()["results"][0]["name"] == "Muzzarella"

        with django_capture_on_commit_callbacks(execute=True):
            auth_client.patch(f"{MENU_URL}{muzzarella.id}/", {"name": "Muzza"}, format="json")

        assert auth_client.get(MENU_URL).json()["results"][0]["name"] == "Muzza"


class TestStock:
    def test_get_and_toggle(self, auth_client, muzzarella):
        assert auth_client.get(STOCK_URL).json() == [
            {"id": str(muzzarella.id), "name": "Muzzarella", "available": True}
        ]

        response = auth_client.patch(
            STOCK_URL, {"id": str(muzzarella.id), "available": False}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["available"] is False

    def test_unavailable_item_cannot_be_ordered(
        self, auth_client, muzzarella, pickup_payload
    ):
        auth_client.patch(
            STOCK_URL, {"id": str(muzzarella.id), "available": False}, format="json"
        )
        response = auth_client.post("/api/v1/orders/", pickup_payload, format="json")
        assert response.status_code == 400
        assert "items.0" in response.json()["errors"]

    def test_toggle_unknown(self, auth_client):
        response = auth_client.patch(
            STOCK_URL,
            {"id": "00000000-0000-0000-0000-000000000000", "available": True},
            format="json",
        )
        assert response.status_code == 404
