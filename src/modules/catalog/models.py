"""Category and MenuItem models (the menu catalog).

Business rules implemented:
- A category decides the sizing scheme of its items: single price, or
  whole/half (``has_multiple_sizes``), optionally sold by the dozen
  (``sold_by_dozen``: sizes "12" / "6" / "unidad").
- ``price_full`` is always greater than zero.
- ``price_half`` / ``price_unit`` only exist for multi-size categories.
- ``measurement_unit`` only exists for single-size categories.
- ``available`` gates purchasability; unavailable items are rejected when
  an order is priced.
- Menu items are soft-deleted; historical orders keep their snapshots.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel

logger = structlog.get_logger(__name__)

SINGLE_SIZE_DEFAULT_UNIT = "unidad"


class Category(BaseModel):
    """Product grouping that determines the sizing/pricing shape."""

    name = models.CharField(max_length=100, unique=True)
    has_multiple_sizes = models.BooleanField(default=False)
    sold_by_dozen = models.BooleanField(default=False)

    class Meta:
        db_table = "categories"
        ordering = ["name"]
        verbose_name_plural = "categories"

    def clean(self) -> None:
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if self.sold_by_dozen and not self.has_multiple_sizes:
            raise ValidationError(
                {"sold_by_dozen": "Dozen sizing requires a multi-size category."}
            )

    def __str__(self) -> str:
        return self.name


class MenuItem(SoftDeleteModel):
    """Sellable menu entry.

    ``category`` stores the category *name*, not a foreign key: orders only
    reference menu items by id at creation time and keep their own copy of
    name, size and price.
    """

    name = models.CharField(max_length=255)
    ingredients = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100, db_index=True)
    price_full = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    price_half = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    price_unit = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    measurement_unit = models.CharField(max_length=50, blank=True, default="")
    available = models.BooleanField(default=True)

    class Meta:
        db_table = "menu_items"
        ordering = ["category", "name"]
        indexes = [
            models.Index(fields=["available"], name="menu_items_available_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_full__gt=0),
                name="menu_items_price_full_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.price_full is not None and self.price_full <= 0:
            raise ValidationError({"price_full": "Price must be greater than zero."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "menu_item_created",
                menu_item_id=str(self.id),
                name=self.name,
                category=self.category,
            )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.name} ({self.category})"
