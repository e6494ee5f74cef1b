"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Dict, List


class OrderNotFound(Exception):
    """The requested order does not exist."""


class OrderValidationFailed(Exception):
    """The order request was rejected; nothing was persisted.

    ``errors`` maps a field (``customer_phone``, ``items.2``, ...) to the
    messages collected for it.
    """

    def __init__(self, errors: Dict[str, List[str]]) -> None:
        self.errors = errors
        super().__init__(f"Order rejected: {sorted(errors)}")


class InvalidOrderStatus(Exception):
    """The transition is not legal from the order's current status."""


class OrderStatusConflict(Exception):
    """The order changed status concurrently; the transition was not applied."""


class DriverNotAssigned(Exception):
    """A driver tried to act on an order that is not assigned to them."""


class OrderDeletionForbidden(Exception):
    """Orders are kept forever; cancel them instead."""
