"""Catalog service layer (Use Cases).

Administrative maintenance of categories and menu items.  The order
pipeline only reads the catalog through the repositories; this service
guards the invariants that pricing relies on:

- ``price_half`` / ``price_unit`` only on multi-size categories.
- ``measurement_unit`` only on single-size categories.
- A category cannot be deleted while menu items still use it.
- Renaming a category carries its menu items along.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
    InvalidCategory,
    InvalidMenuItem,
    MenuItemNotFound,
)
from modules.catalog.models import Category, MenuItem
from modules.core.cache import CachedView

if TYPE_CHECKING:
    from modules.catalog.dtos import (
        CreateCategoryDTO,
        CreateMenuItemDTO,
        UpdateCategoryDTO,
        UpdateMenuItemDTO,
    )
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        IMenuItemRepository,
    )

logger = structlog.get_logger(__name__)

# Catalog edits change the menu and how delivered sales are reported.
CATALOG_AFFECTED_VIEWS = frozenset({CachedView.HOME, CachedView.STATISTICS})


def check_item_fits_category(item: MenuItem, category: Category) -> None:
    """Raise ``InvalidMenuItem`` if *item*'s optional fields clash with *category*."""
    errors: Dict[str, List[str]] = {}
    if category.has_multiple_sizes:
        if item.measurement_unit:
            errors.setdefault("measurement_unit", []).append(
                f"Category '{category.name}' is priced by size; "
                "measurement unit is not allowed."
            )
    else:
        for field in ("price_half", "price_unit"):
            if getattr(item, field) is not None:
                errors.setdefault(field, []).append(
                    f"Category '{category.name}' has a single price; "
                    f"{field} is not allowed."
                )
    if errors:
        raise InvalidMenuItem(errors)


class CatalogService:
    """Application service for Category and MenuItem use-cases.

    Receives both repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        category_repository: ICategoryRepository,
        menu_item_repository: IMenuItemRepository,
    ) -> None:
        self._categories = category_repository
        self._items = menu_item_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_categories(self) -> List[Category]:
        return self._categories.list()

    def list_menu_items(self, filters: Optional[Dict[str, Any]] = None) -> List[MenuItem]:
        return self._items.list(filters)

    def get_category(self, id: str) -> Category:
        category = self._categories.get_by_id(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.")
        return category

    def get_menu_item(self, id: str) -> MenuItem:
        item = self._items.get_by_id(id)
        if not item:
            raise MenuItemNotFound(f"Menu item {id} not found.")
        return item

    def list_stock(self) -> List[Dict[str, Any]]:
        """Availability overview: ``[{id, name, available}]``."""
        return [
            {"id": str(item.id), "name": item.name, "available": item.available}
            for item in self._items.list()
        ]

    # ------------------------------------------------------------------
    # Category commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_category(self, dto: CreateCategoryDTO) -> Category:
        """Create a category.

        Raises:
            CategoryAlreadyExists: a category with that name exists.
            InvalidCategory: dozen sizing on a single-size category.
        """
        if self._categories.get_by_name(dto.name):
            raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")
        category = Category(
            name=dto.name,
            has_multiple_sizes=dto.has_multiple_sizes,
            sold_by_dozen=dto.sold_by_dozen,
        )
        self._check_category(category)
        category = self._categories.save(category)
        logger.info("category.created", category_id=str(category.id))
        return category

    @transaction.atomic
    def update_category(self, id: str, dto: UpdateCategoryDTO) -> Category:
        """Update a category, carrying its menu items along on rename.

        Switching the sizing scheme re-validates every item of the category.

        Raises:
            CategoryNotFound, CategoryAlreadyExists, InvalidCategory,
            InvalidMenuItem.
        """
        category = self.get_category(id)
        old_name = category.name
        changes = dto.changes()

        new_name = changes.get("name")
        if new_name and new_name.lower() != old_name.lower():
            if self._categories.get_by_name(new_name):
                raise CategoryAlreadyExists(f"Category '{new_name}' already exists.")

        for field, value in changes.items():
            setattr(category, field, value)
        self._check_category(category)

        for item in self._items.list({"category__iexact": old_name}):
            check_item_fits_category(item, category)

        category = self._categories.save(category)
        if category.name != old_name:
            self._items.rename_category(old_name, category.name)
        logger.info("category.updated", category_id=str(id))
        return category

    @transaction.atomic
    def delete_category(self, id: str) -> None:
        """Delete a category that no live menu item uses.

        Raises:
            CategoryNotFound, CategoryInUse.
        """
        category = self.get_category(id)
        in_use = self._items.count_in_category(category.name)
        if in_use:
            raise CategoryInUse(
                f"Category '{category.name}' is used by {in_use} menu item(s)."
            )
        self._categories.delete(id)
        logger.info("category.deleted", category_id=str(id))

    # ------------------------------------------------------------------
    # Menu item commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_menu_item(self, dto: CreateMenuItemDTO) -> MenuItem:
        """Create a menu item in an existing category.

        Raises:
            CategoryNotFound: the category does not exist.
            InvalidMenuItem: fields do not fit the category's sizing scheme.
        """
        category = self._require_category(dto.category)
        item = MenuItem(
            name=dto.name,
            ingredients=dto.ingredients,
            category=category.name,
            price_full=dto.price_full,
            price_half=dto.price_half,
            price_unit=dto.price_unit,
            measurement_unit=dto.measurement_unit,
            available=dto.available,
        )
        check_item_fits_category(item, category)
        item = self._items.save(item)
        logger.info("menu_item.created", menu_item_id=str(item.id))
        return item

    @transaction.atomic
    def update_menu_item(self, id: str, dto: UpdateMenuItemDTO) -> MenuItem:
        """Apply a partial update to a menu item.

        Raises:
            MenuItemNotFound, CategoryNotFound, InvalidMenuItem.
        """
        item = self.get_menu_item(id)
        for field, value in dto.changes().items():
            setattr(item, field, value)
        if item.measurement_unit is None:
            item.measurement_unit = ""
        category = self._require_category(item.category)
        item.category = category.name
        check_item_fits_category(item, category)
        item = self._items.save(item)
        logger.info("menu_item.updated", menu_item_id=str(id))
        return item

    @transaction.atomic
    def set_availability(self, id: str, available: bool) -> MenuItem:
        """Mark a menu item as (un)available for new orders.

        Raises:
            MenuItemNotFound: the item does not exist.
        """
        item = self._items.set_availability(id, available)
        if not item:
            raise MenuItemNotFound(f"Menu item {id} not found.")
        return item

    @transaction.atomic
    def delete_menu_item(self, id: str) -> None:
        """Soft-delete a menu item; past orders keep their snapshots.

        Raises:
            MenuItemNotFound: the item does not exist.
        """
        self.get_menu_item(id)
        self._items.delete(id)
        logger.info("menu_item.deleted", menu_item_id=str(id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_category(self, name: str) -> Category:
        category = self._categories.get_by_name(name)
        if not category:
            raise CategoryNotFound(f"Category '{name}' not found.")
        return category

    @staticmethod
    def _check_category(category: Category) -> None:
        if category.sold_by_dozen and not category.has_multiple_sizes:
            raise InvalidCategory(
                {"sold_by_dozen": ["Dozen sizing requires a multi-size category."]}
            )
