"""Catalog domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Dict, List


class CategoryNotFound(Exception):
    """The requested category does not exist."""


class CategoryAlreadyExists(Exception):
    """A category with the same name already exists."""


class CategoryInUse(Exception):
    """The category is still referenced by menu items and cannot be deleted."""


class MenuItemNotFound(Exception):
    """The requested menu item does not exist or has been deleted."""


class InvalidMenuItem(Exception):
    """Menu item fields do not fit the sizing scheme of its category.

    ``errors`` maps field names to messages.
    """

    def __init__(self, errors: Dict[str, List[str]]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{k}: {', '.join(v)}" for k, v in errors.items()))


class InvalidCategory(Exception):
    """Category flags are inconsistent (e.g. dozen sizing without sizes)."""

    def __init__(self, errors: Dict[str, List[str]]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{k}: {', '.join(v)}" for k, v in errors.items()))
