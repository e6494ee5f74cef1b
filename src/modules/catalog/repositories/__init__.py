"""Catalog repositories package."""

from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    MenuItemDjangoRepository,
)
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IMenuItemRepository,
)

__all__ = [
    "CategoryDjangoRepository",
    "ICategoryRepository",
    "IMenuItemRepository",
    "MenuItemDjangoRepository",
]
