"""Order lifecycle rules.

Pure functions over the transition table in ``constants``: which moves
are legal, what "advance" means for each status and which cached views
a mutation makes stale.  The service layer applies them under a row
lock; nothing here touches the database.
"""

from __future__ import annotations

from typing import FrozenSet, Optional

from modules.core.cache import CachedView
from modules.orders.constants import (
    KITCHEN_STATUSES,
    NEXT_STATUS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)

CREATION_AFFECTED_VIEWS: FrozenSet[str] = frozenset(
    {CachedView.HOME, CachedView.KITCHEN, CachedView.STATISTICS}
)

_REPORTED_STATUSES = {OrderStatus.ENTREGADO, OrderStatus.CANCELADO}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATES


def can_transition(current: str, target: str) -> bool:
    """Return ``True`` if *current* -> *target* is a legal single step."""
    return target in VALID_TRANSITIONS.get(current, set())


def next_status(current: str) -> Optional[str]:
    """The forward step from *current*, or ``None`` if it cannot advance."""
    return NEXT_STATUS.get(current)


def affected_views_for_transition(old_status: str, new_status: str) -> FrozenSet[str]:
    """Cached views whose content changes when an order moves *old* -> *new*.

    - kitchen: the order enters or leaves the kitchen queue.
    - drivers: the order becomes (or stops being) ready for delivery.
    - statistics: the order becomes (or stops being) delivered or cancelled.
    """
    touched = {old_status, new_status}
    views = set()
    if touched & set(KITCHEN_STATUSES):
        views.add(CachedView.KITCHEN)
    if OrderStatus.LISTO in touched:
        views.add(CachedView.DRIVERS)
    if touched & _REPORTED_STATUSES:
        views.add(CachedView.STATISTICS)
    return frozenset(views)
