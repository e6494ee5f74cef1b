"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``OrderLineRequestDTO``: one requested line (menu item id, size, quantity).
- ``CreateOrderDTO``: the shape of an order request.  Only shape is checked
  here; catalog and delivery rules are the validator's job.
- ``PricedLine`` / ``PricedOrder``: the validator's output, ready to persist.
- ``OrderMutation``: result of every order command, carrying the cached
  views the change made stale.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, FrozenSet, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from modules.catalog.dtos import NonBlankStr
from modules.orders.constants import DeliveryType

if TYPE_CHECKING:
    from modules.orders.models import Order

PHONE_PATTERN = re.compile(r"^\d{8,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")


def _check_phone(v: str) -> str:
    if not PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", v)):
        raise ValueError("Phone number must have between 8 and 15 digits.")
    return v


Phone = Annotated[NonBlankStr, AfterValidator(_check_phone)]


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class OrderLineRequestDTO(BaseModel):
    """A requested line.

    ``quantity`` must be an integer here; whether it is positive is a
    pricing rule, reported per line together with the other line errors.
    """

    model_config = ConfigDict(frozen=True)

    menu_item_id: NonBlankStr
    size: NonBlankStr
    quantity: int


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``customer_name`` is non-empty.
    - ``customer_phone`` has 8 to 15 digits once spaces, dashes and
      parentheses are removed.
    - ``delivery_type`` is ``retiro`` or ``envio``.
    - ``items`` contains at least one line.
    - ``delay``, when given, is not negative.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    customer_name: NonBlankStr
    customer_phone: Phone
    delivery_type: DeliveryType
    items: List[OrderLineRequestDTO]
    address: Optional[str] = None
    delivery_person_id: Optional[str] = None
    delay: Optional[int] = Field(default=None, ge=0)
    idempotency_key: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[OrderLineRequestDTO]
    ) -> List[OrderLineRequestDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v


# ---------------------------------------------------------------------------
# Validator output
# ---------------------------------------------------------------------------


class PricedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    menu_item_id: str
    name: str
    size: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class PricedOrder(BaseModel):
    """A validated, fully priced order that has not been persisted yet."""

    model_config = ConfigDict(frozen=True)

    customer_name: str
    customer_phone: str
    delivery_type: DeliveryType
    address: str
    delivery_person_id: Optional[str]
    delay: int
    estimated_time: str
    total_amount: Decimal
    items: List[PricedLine]
    idempotency_key: Optional[str] = None


# ---------------------------------------------------------------------------
# Command result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderMutation:
    """An order after a command, plus the cached views it invalidates."""

    order: Order
    affected_views: FrozenSet[str] = field(default_factory=frozenset)
    # True when an idempotency key matched an existing order.
    replayed: bool = False
