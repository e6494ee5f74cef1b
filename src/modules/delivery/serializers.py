"""Delivery DRF serializers (output only; input goes through DTOs)."""

from __future__ import annotations

from rest_framework import serializers

from modules.delivery.models import DeliveryPerson


class DeliveryPersonSerializer(serializers.ModelSerializer):
    """Public view of a driver; the password hash is never exposed."""

    class Meta:
        model = DeliveryPerson
        fields = ["id", "name", "created_at", "updated_at"]
        read_only_fields = fields
