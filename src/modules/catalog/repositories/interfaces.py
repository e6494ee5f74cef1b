"""Catalog repository interfaces.

The order validator and the reporting aggregator only *read* the
catalog; the write methods serve the administrative endpoints.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Category, MenuItem


class ICategoryRepository(IRepository["Category"]):
    """Repository contract for categories."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Category]:
        """Retrieve a category by its (case-insensitive) name."""

    @abstractmethod
    def by_name(self) -> Dict[str, Category]:
        """Return every category keyed by name."""


class IMenuItemRepository(IRepository["MenuItem"]):
    """Repository contract for menu items (soft-deleted rows are invisible)."""

    @abstractmethod
    def get_many(self, ids: Iterable[str]) -> Dict[str, MenuItem]:
        """Return the live menu items among *ids*, keyed by ``str(id)``."""

    @abstractmethod
    def count_in_category(self, category_name: str) -> int:
        """Count live menu items that belong to *category_name*."""

    @abstractmethod
    def rename_category(self, old_name: str, new_name: str) -> int:
        """Move every item of *old_name* to *new_name*; returns rows updated."""

    @abstractmethod
    def set_availability(self, id: str, available: bool) -> Optional[MenuItem]:
        """Flip the ``available`` flag; returns ``None`` if the item is missing."""
