"""Domain events for the Orders bounded context.

``payload`` carries ``old_status`` / ``new_status`` for status events and
``order_number`` / ``total_amount`` for creation.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled."""


@dataclass(frozen=True)
class OrderReactivated(DomainEvent):
    """Raised when a cancelled order goes back to ``nuevo``."""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every other status change (advance, delivery)."""
