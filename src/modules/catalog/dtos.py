"""Catalog DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views) and the
Service layer.  DTOs are immutable (``frozen=True``).

Update DTOs only touch the fields the client actually sent
(``model_fields_set``), so ``{"price_half": null}`` clears a half price
while omitting it leaves the stored value alone.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict


def _strip_required(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Must not be empty.")
    return v.strip()


def _positive(v: Decimal) -> Decimal:
    if v <= 0:
        raise ValueError("Price must be greater than zero.")
    return v


NonBlankStr = Annotated[str, AfterValidator(_strip_required)]
Price = Annotated[Decimal, AfterValidator(_positive)]


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class CreateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: NonBlankStr
    has_multiple_sizes: bool = False
    sold_by_dozen: bool = False


class UpdateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[NonBlankStr] = None
    has_multiple_sizes: Optional[bool] = None
    sold_by_dozen: Optional[bool] = None

    def changes(self) -> dict:
        """Return only the fields explicitly provided (and not null)."""
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if getattr(self, field) is not None
        }


# ---------------------------------------------------------------------------
# Menu items
# ---------------------------------------------------------------------------


class CreateMenuItemDTO(BaseModel):
    """Immutable DTO for menu item creation.

    Validates:
    - ``name`` and ``category`` are non-empty.
    - ``price_full`` is greater than zero.
    - ``price_half`` / ``price_unit``, when given, are greater than zero.

    Whether the optional prices and ``measurement_unit`` fit the category
    is checked by ``CatalogService``.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: NonBlankStr
    category: NonBlankStr
    price_full: Price
    ingredients: str = ""
    price_half: Optional[Price] = None
    price_unit: Optional[Price] = None
    measurement_unit: str = ""
    available: bool = True


class UpdateMenuItemDTO(BaseModel):
    """Immutable DTO for partial menu item updates."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Optional[NonBlankStr] = None
    category: Optional[NonBlankStr] = None
    price_full: Optional[Price] = None
    ingredients: Optional[str] = None
    price_half: Optional[Price] = None
    price_unit: Optional[Price] = None
    measurement_unit: Optional[str] = None
    available: Optional[bool] = None

    def changes(self) -> dict:
        """Return only the fields explicitly provided by the client.

        ``price_half`` / ``price_unit`` may be cleared with an explicit null;
        every other field ignores nulls.
        """
        nullable = {"price_half", "price_unit"}
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if getattr(self, field) is not None or field in nullable
        }
