"""Catalog DRF serializers (read side).

Writes go through the Pydantic DTOs in ``dtos.py`` and the
``CatalogService``; these serializers only render responses.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Category, MenuItem


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "has_multiple_sizes", "sold_by_dozen"]
        read_only_fields = fields


class MenuItemSerializer(serializers.ModelSerializer):
    """Read serializer for menu items, as shown on the menu and admin screens."""

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "name",
            "ingredients",
            "category",
            "price_full",
            "price_half",
            "price_unit",
            "measurement_unit",
            "available",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AvailabilitySerializer(serializers.Serializer):
    """Validates ``PATCH /menu-items/stock/`` payloads."""

    id = serializers.UUIDField()
    available = serializers.BooleanField()
