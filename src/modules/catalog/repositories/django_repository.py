"""Django ORM implementation of the catalog repositories.

Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising — the Service Layer decides how to translate a
missing entity into an API response.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.catalog.models import Category, MenuItem
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IMenuItemRepository,
)

logger = structlog.get_logger(__name__)


class CategoryDjangoRepository(ICategoryRepository):
    """Concrete Category repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Category]:
        try:
            return Category.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_name(self, name: str) -> Optional[Category]:
        return Category.objects.filter(name__iexact=name.strip()).first()

    def by_name(self) -> Dict[str, Category]:
        return {category.name: category for category in Category.objects.all()}

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Category]:
        queryset = Category.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Category) -> Category:
        entity.save()
        logger.info("category.saved", category_id=str(entity.id), name=entity.name)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        category = self.get_by_id(id)
        if not category:
            return False
        category.delete()
        logger.info("category.deleted", category_id=str(id))
        return True


class MenuItemDjangoRepository(IMenuItemRepository):
    """Concrete MenuItem repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[MenuItem]:
        """Retrieve a live menu item; ``None`` for missing, deleted or invalid IDs."""
        try:
            return MenuItem.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_many(self, ids: Iterable[str]) -> Dict[str, MenuItem]:
        valid_ids = []
        for id in set(ids):
            try:
                valid_ids.append(UUID(str(id)))
            except ValueError:
                continue
        items = MenuItem.objects.alive().filter(id__in=valid_ids)
        return {str(item.id): item for item in items}

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[MenuItem]:
        """List live menu items with optional Django ORM look-ups.

        Examples of valid filters::

            {"available": True}
            {"category": "Pizza"}
        """
        queryset = MenuItem.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def count_in_category(self, category_name: str) -> int:
        return MenuItem.objects.alive().filter(category__iexact=category_name).count()

    @transaction.atomic
    def rename_category(self, old_name: str, new_name: str) -> int:
        updated = MenuItem.objects.filter(category__iexact=old_name).update(
            category=new_name
        )
        logger.info(
            "menu_item.category_renamed",
            old_name=old_name,
            new_name=new_name,
            updated=updated,
        )
        return updated

    @transaction.atomic
    def set_availability(self, id: str, available: bool) -> Optional[MenuItem]:
        item = self.get_by_id(id)
        if not item:
            return None
        item.available = available
        item.save(update_fields=["available"])
        logger.info(
            "menu_item.availability_changed",
            menu_item_id=str(id),
            available=available,
        )
        return item

    @transaction.atomic
    def save(self, entity: MenuItem) -> MenuItem:
        entity.save()
        logger.info("menu_item.saved", menu_item_id=str(entity.id), name=entity.name)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a menu item by ID."""
        item = self.get_by_id(id)
        if not item:
            return False
        item.delete()
        logger.info("menu_item.soft_deleted", menu_item_id=str(id))
        return True
