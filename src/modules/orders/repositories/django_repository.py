"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` to ensure
the Order aggregate (Order + OrderItems) is persisted atomically.

Status changes combine a row lock (``select_for_update``) taken by the
service with a conditional ``UPDATE ... WHERE status = expected``, so a
writer that read a stale status changes nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.orders.exceptions import OrderDeletionForbidden
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

if TYPE_CHECKING:
    from modules.orders.dtos import PricedOrder

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, priced: PricedOrder) -> Order:
        order = Order(
            customer_name=priced.customer_name,
            customer_phone=priced.customer_phone,
            delivery_type=priced.delivery_type,
            address=priced.address,
            delivery_person_id=priced.delivery_person_id,
            delay=priced.delay,
            estimated_time=priced.estimated_time,
            total_amount=priced.total_amount,
            idempotency_key=priced.idempotency_key,
        )
        order.save()

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    menu_item_id=line.menu_item_id,
                    name=line.name,
                    size=line.size,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                )
                for line in priced.items
            ]
        )

        logger.info(
            "order.persisted", order_id=str(order.id), item_count=len(priced.items)
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and history.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        filters = dict(filters or {})
        limit = filters.pop("limit", None)
        status_in = filters.pop("status_in", None)

        queryset = Order.objects.prefetch_related("items")
        if status_in is not None:
            queryset = queryset.filter(status__in=list(status_in))
        if filters:
            queryset = queryset.filter(**filters)
        queryset = queryset.order_by("-created_at", "-id")
        if limit is not None:
            queryset = queryset[: int(limit)]
        return list(queryset)

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return (
            Order.objects.prefetch_related("items", "status_history")
            .filter(idempotency_key=key)
            .first()
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @transaction.atomic
    def set_status(self, id: str, expected: str, new: str) -> bool:
        updated = Order.objects.filter(id=id, status=expected).update(
            status=new, updated_at=timezone.now()
        )
        if not updated:
            logger.warning(
                "order.status_conflict", order_id=str(id), expected=expected, new=new
            )
        return bool(updated)

    @transaction.atomic
    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        actor: str = "",
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            actor=actor,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        entity.save()
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    def delete(self, id: str) -> bool:
        raise OrderDeletionForbidden(f"Order {id} cannot be deleted; cancel it instead.")
