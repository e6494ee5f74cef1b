"""Order service layer (Use Cases).

Orchestrates order creation and the status lifecycle.  All write
operations are atomic: the service defines the unit-of-work boundary.

Business rules enforced:
- Orders are validated and priced against the catalog; any error
  rejects the whole order.
- Status transitions follow the state machine; no step is skipped.
- Each transition locks the order row, checks the source status and is
  applied with a conditional update; a stale writer gets a conflict.
- Drivers may only deliver ``listo`` orders assigned to them.
- Reactivation only resets the status.
- History is recorded on creation and on every status change.

Every command returns an ``OrderMutation`` naming the cached views it
made stale; the API layer schedules their invalidation.  Domain events
are published once the transaction commits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

import structlog
from django.db import transaction

from modules.orders.constants import KITCHEN_STATUSES, OrderStatus
from modules.orders.dtos import OrderMutation
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderReactivated,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    DriverNotAssigned,
    InvalidOrderStatus,
    OrderNotFound,
    OrderStatusConflict,
)
from modules.orders.lifecycle import (
    CREATION_AFFECTED_VIEWS,
    affected_views_for_transition,
    can_transition,
    next_status,
)
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.validation import OrderValidator
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

_KITCHEN_RANK = {status: rank for rank, status in enumerate(KITCHEN_STATUSES)}


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        validator: OrderValidator,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._validator = validator
        self._event_bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(
        self,
        raw: Mapping[str, Any],
        idempotency_key: Optional[str] = None,
        actor: str = "",
    ) -> OrderMutation:
        """Validate, price and persist a new order in status ``nuevo``.

        Steps:
        1. Replay: an already-used ``idempotency_key`` returns that order.
        2. Validate and price the request (nothing is written on failure).
        3. Persist order + line items atomically.
        4. Record initial status history.

        Raises:
            OrderValidationFailed: the request was rejected.
        """
        log = logger.bind(idempotency_key=idempotency_key)
        log.info("order.creation_started")

        if idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(idempotency_key)
            if existing:
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return OrderMutation(order=existing, replayed=True)

        data = dict(raw)
        data["idempotency_key"] = idempotency_key
        priced = self._validator.validate_and_price(data)

        order = self._order_repo.create(priced)
        self._order_repo.add_history(
            order_id=order.id,
            new_status=OrderStatus.NUEVO,
            actor=actor,
            notes="Order created",
        )
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                payload={
                    "order_number": order.order_number,
                    "total_amount": str(order.total_amount),
                },
            )
        )
        self._publish_on_commit(order)

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=str(order.total_amount),
        )
        return OrderMutation(
            order=self._order_repo.get_by_id(str(order.id)) or order,
            affected_views=CREATION_AFFECTED_VIEWS,
        )

    @transaction.atomic
    def advance_order(self, order_id: str, actor: str = "") -> OrderMutation:
        """Move an order one step forward (nuevo -> preparacion -> listo -> entregado).

        Raises:
            OrderNotFound, InvalidOrderStatus, OrderStatusConflict.
        """
        order = self._lock(order_id)
        target = next_status(order.status)
        if target is None:
            logger.warning(
                "order.invalid_transition", order_id=str(order_id), current=order.status
            )
            raise InvalidOrderStatus(f"Order in status {order.status} cannot advance.")
        return self._move(order, target, actor=actor)

    @transaction.atomic
    def update_status(
        self,
        order_id: str,
        new_status: str,
        actor: str = "",
        notes: str = "",
    ) -> OrderMutation:
        """Apply an explicit transition to *new_status*.

        Raises:
            OrderNotFound, InvalidOrderStatus, OrderStatusConflict.
        """
        if new_status not in OrderStatus.values:
            raise InvalidOrderStatus(f"Unknown status '{new_status}'.")
        order = self._lock(order_id)
        return self._move(order, new_status, actor=actor, notes=notes)

    @transaction.atomic
    def cancel_order(self, order_id: str, actor: str = "", notes: str = "") -> OrderMutation:
        """Cancel a ``nuevo``, ``preparacion`` or ``listo`` order.

        Raises:
            OrderNotFound, InvalidOrderStatus, OrderStatusConflict.
        """
        order = self._lock(order_id)
        return self._move(
            order, OrderStatus.CANCELADO, actor=actor, notes=notes or "Order cancelled"
        )

    @transaction.atomic
    def reactivate_order(
        self, order_id: str, actor: str = "", notes: str = ""
    ) -> OrderMutation:
        """Bring a cancelled order back to ``nuevo``.

        Items, total, ``estimated_time`` and ``created_at`` are kept as they
        were; only the status changes.

        Raises:
            OrderNotFound, InvalidOrderStatus, OrderStatusConflict.
        """
        order = self._lock(order_id)
        if order.status != OrderStatus.CANCELADO:
            raise InvalidOrderStatus(
                f"Only cancelled orders can be reactivated (status is {order.status})."
            )
        return self._move(
            order, OrderStatus.NUEVO, actor=actor, notes=notes or "Order reactivated"
        )

    @transaction.atomic
    def deliver_order(self, order_id: str, driver_id: str) -> OrderMutation:
        """Mark a driver's ``listo`` order as ``entregado``.

        Raises:
            OrderNotFound: order does not exist.
            DriverNotAssigned: the order belongs to another driver (or none).
            InvalidOrderStatus: the order is not ``listo``.
            OrderStatusConflict: the order changed concurrently.
        """
        order = self._lock(order_id)
        if str(order.delivery_person_id or "") != str(driver_id):
            logger.warning(
                "order.driver_not_assigned",
                order_id=str(order_id),
                delivery_person_id=str(driver_id),
            )
            raise DriverNotAssigned(f"Order {order_id} is not assigned to this driver.")
        if order.status != OrderStatus.LISTO:
            raise InvalidOrderStatus(
                f"Only ready orders can be delivered (status is {order.status})."
            )
        return self._move(order, OrderStatus.ENTREGADO, actor=f"driver:{driver_id}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Return orders newest first, optionally filtered (see ``IOrderRepository.list``)."""
        return self._order_repo.list(filters)

    def kitchen_queue(self) -> List[Order]:
        """Open orders by status (nuevo, preparacion, listo), oldest first within each."""
        orders = self._order_repo.list({"status_in": KITCHEN_STATUSES})
        return sorted(orders, key=lambda o: (_KITCHEN_RANK[o.status], o.created_at))

    def driver_orders(self, driver_id: str) -> List[Order]:
        """Ready orders assigned to *driver_id*."""
        return self._order_repo.list(
            {"delivery_person_id": driver_id, "status": OrderStatus.LISTO}
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock(self, order_id: str) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _move(
        self,
        order: Order,
        target: str,
        actor: str = "",
        notes: str = "",
    ) -> OrderMutation:
        """Apply ``order.status -> target`` on a locked order."""
        old_status = order.status
        log = logger.bind(
            order_id=str(order.id), current_status=old_status, new_status=target
        )

        if not can_transition(old_status, target):
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(f"Cannot transition from {old_status} to {target}.")

        if not self._order_repo.set_status(str(order.id), old_status, target):
            raise OrderStatusConflict(
                f"Order {order.id} is no longer in status {old_status}."
            )
        order.status = target

        self._order_repo.add_history(
            order_id=order.id,
            new_status=target,
            old_status=old_status,
            actor=actor,
            notes=notes,
        )

        payload = {"old_status": old_status, "new_status": target}
        if target == OrderStatus.CANCELADO:
            event = OrderCancelled(aggregate_id=order.id, payload=payload)
        elif old_status == OrderStatus.CANCELADO:
            event = OrderReactivated(aggregate_id=order.id, payload=payload)
        else:
            event = OrderStatusChanged(aggregate_id=order.id, payload=payload)
        order.add_domain_event(event)
        self._publish_on_commit(order)

        log.info("order.status_updated", actor=actor or None)
        return OrderMutation(
            order=self._order_repo.get_by_id(str(order.id)) or order,
            affected_views=affected_views_for_transition(old_status, target),
        )

    def _publish_on_commit(self, order: Order) -> None:
        events = order.pull_domain_events()
        if events:
            transaction.on_commit(lambda: self._event_bus.publish_all(events))
