"""Pricing resolver.

Turns ``(menu item, requested size token, category, quantity)`` into a
unit price.  A requested size is first parsed into a ``SizeSelector``,
a closed set of shapes driven by the category flags:

============================  ==============================  ============
category                      token                           selector
============================  ==============================  ============
single size                   ``measurement_unit`` / unidad   SingleMeasurement(label)
multi size                    entera                          Whole
multi size                    media                           Half
multi size                    unidad                          UnitCount(1)
multi size, sold by dozen     12 / 6                          UnitCount(12) / UnitCount(6)
============================  ==============================  ============

Then the selector picks the price field.  Missing or non-positive prices
are rejections: nothing is ever sold for free and half sizes never fall
back to the full price.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

from modules.catalog.models import SINGLE_SIZE_DEFAULT_UNIT

if TYPE_CHECKING:
    from modules.catalog.models import Category, MenuItem

WHOLE_TOKEN = "entera"
HALF_TOKEN = "media"
UNIT_TOKEN = "unidad"
DOZEN = 12
HALF_DOZEN = 6
MAX_QUANTITY = 999


class PricingRejected(Exception):
    """The requested size/quantity cannot be priced for this item."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


# ---------------------------------------------------------------------------
# SizeSelector
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Whole:
    pass


@dataclass(frozen=True)
class Half:
    pass


@dataclass(frozen=True)
class UnitCount:
    count: int


@dataclass(frozen=True)
class SingleMeasurement:
    label: str


SizeSelector = Union[Whole, Half, UnitCount, SingleMeasurement]


def normalize_size(token: str) -> str:
    return (token or "").strip().lower()


def parse_size(token: str, menu_item: MenuItem, category: Category) -> SizeSelector:
    """Parse *token* against the sizing scheme of *category*.

    Raises:
        PricingRejected: the token is not a size this item is sold in.
    """
    size = normalize_size(token)

    if not category.has_multiple_sizes:
        label = (menu_item.measurement_unit or SINGLE_SIZE_DEFAULT_UNIT).strip()
        if size == label.lower():
            return SingleMeasurement(label)
        raise PricingRejected(
            f"Invalid size '{token}' for {menu_item.name}; only '{label}' is sold."
        )

    if size == WHOLE_TOKEN:
        return Whole()
    if size == HALF_TOKEN:
        return Half()
    if size == UNIT_TOKEN:
        return UnitCount(1)
    if category.sold_by_dozen and size in (str(DOZEN), str(HALF_DOZEN)):
        return UnitCount(int(size))
    raise PricingRejected(f"Invalid size '{token}' for {menu_item.name}.")


def price_for(selector: SizeSelector, menu_item: MenuItem) -> Optional[Decimal]:
    """The catalog price that *selector* maps to (may be unset)."""
    if isinstance(selector, (Whole, SingleMeasurement)):
        return menu_item.price_full
    if isinstance(selector, Half):
        return menu_item.price_half
    if selector.count == DOZEN:
        return menu_item.price_full
    if selector.count == HALF_DOZEN:
        return menu_item.price_half
    return menu_item.price_unit


def resolve_price(
    menu_item: MenuItem,
    requested_size: str,
    category: Category,
    quantity: int = 1,
) -> Decimal:
    """Return the unit price of *menu_item* in *requested_size*.

    Raises:
        PricingRejected: invalid size, unpriced size or invalid quantity.
    """
    selector = parse_size(requested_size, menu_item, category)
    price = price_for(selector, menu_item)
    if price is None or price <= 0:
        raise PricingRejected(
            f"{menu_item.name} has no price for size '{requested_size}'."
        )
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise PricingRejected(
            f"Quantity for {menu_item.name} must be a positive integer."
        )
    if quantity > MAX_QUANTITY:
        raise PricingRejected(
            f"Quantity for {menu_item.name} cannot exceed {MAX_QUANTITY}."
        )
    return Decimal(price)
