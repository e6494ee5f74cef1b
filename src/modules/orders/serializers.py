"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer; order requests are checked
by ``OrderValidator``, so only the small status payload is validated
here.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class UpdateStatusSerializer(serializers.Serializer):
    """Validates the explicit status change payload."""

    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class TransitionNotesSerializer(serializers.Serializer):
    """Optional notes for cancel / reactivate."""

    notes = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for the line item snapshot."""

    class Meta:
        model = OrderItem
        fields = [
            "menu_item_id",
            "name",
            "size",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "actor",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Order with its line items; used by lists and dashboards."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "customer_name",
            "customer_phone",
            "delivery_type",
            "address",
            "delivery_person_id",
            "delay",
            "estimated_time",
            "total_amount",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    """Full order with nested items and history."""

    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + ["updated_at", "status_history"]
        read_only_fields = fields
