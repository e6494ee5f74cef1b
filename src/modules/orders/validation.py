"""Order validator.

Turns a raw order request into a ``PricedOrder`` or an
``OrderValidationFailed`` carrying every problem found:

1. Shape (required fields, phone pattern, non-empty cart).  Shape errors
   are reported immediately, all offending fields at once.
2. Delivery rules: ``envio`` needs an address and an existing driver.
3. Every line is looked up in the catalog and priced.  Line subtotals and
   the order total must fit the price columns.  Line errors are
   collected, never short-circuited.
4. Any error from 2 or 3 rejects the whole order.

The validator reads the catalog and the drivers through repositories and
writes nothing.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional
from uuid import UUID

import structlog
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError

from modules.core.validation import pydantic_errors
from modules.orders.constants import MAX_AMOUNT, PICKUP_ADDRESS, DeliveryType
from modules.orders.dtos import CreateOrderDTO, PricedLine, PricedOrder
from modules.orders.exceptions import OrderValidationFailed
from modules.orders.policies import DelayPolicy
from modules.orders.pricing import PricingRejected, normalize_size, resolve_price

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        IMenuItemRepository,
    )
    from modules.delivery.repositories.interfaces import IDeliveryPersonRepository

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def _canonical_id(value: str) -> str:
    try:
        return str(UUID(value))
    except ValueError:
        return value


def order_total(lines: List[PricedLine]) -> Decimal:
    """Sum of ``unit_price * quantity`` rounded to 2 decimals."""
    total = sum((line.subtotal for line in lines), Decimal("0"))
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def estimated_time(now: datetime, delay_minutes: int) -> str:
    """Local ``HH:MM`` at which an order placed at *now* should be ready."""
    return timezone.localtime(now + timedelta(minutes=delay_minutes)).strftime("%H:%M")


class OrderValidator:
    """Validates and prices order requests against the catalog."""

    def __init__(
        self,
        menu_item_repository: IMenuItemRepository,
        category_repository: ICategoryRepository,
        delivery_person_repository: IDeliveryPersonRepository,
        delay_policy: Optional[DelayPolicy] = None,
    ) -> None:
        self._menu_items = menu_item_repository
        self._categories = category_repository
        self._drivers = delivery_person_repository
        self._delay_policy = delay_policy or DelayPolicy.from_settings()

    def validate_and_price(
        self,
        raw: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> PricedOrder:
        """Validate *raw* and return the priced order.

        Raises:
            OrderValidationFailed: with ``errors`` mapping each offending
                field (or ``items.<index>`` line) to its messages.
        """
        try:
            dto = CreateOrderDTO(**dict(raw))
        except PydanticValidationError as exc:
            shape_errors = pydantic_errors(exc)
            logger.info(
                "order.validation_failed", stage="shape", fields=sorted(shape_errors)
            )
            raise OrderValidationFailed(shape_errors) from exc

        errors: Dict[str, List[str]] = {}
        address, driver_id = self._check_delivery(dto, errors)
        lines = self._price_lines(dto, errors)
        total = order_total(lines)
        if total > MAX_AMOUNT:
            errors.setdefault("total_amount", []).append(
                f"Order total cannot exceed {MAX_AMOUNT}."
            )

        if errors:
            logger.info("order.validation_failed", stage="catalog", fields=sorted(errors))
            raise OrderValidationFailed(errors)

        delay = self._delay_policy.minutes_for(dto.delivery_type, dto.delay)
        return PricedOrder(
            customer_name=dto.customer_name,
            customer_phone=dto.customer_phone,
            delivery_type=dto.delivery_type,
            address=address,
            delivery_person_id=driver_id,
            delay=delay,
            estimated_time=estimated_time(now or timezone.now(), delay),
            total_amount=total,
            items=lines,
            idempotency_key=dto.idempotency_key,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _check_delivery(
        self, dto: CreateOrderDTO, errors: Dict[str, List[str]]
    ) -> tuple[str, Optional[str]]:
        """Return ``(address, driver_id)``; pickup orders get the sentinel address."""
        if dto.delivery_type == DeliveryType.RETIRO:
            return PICKUP_ADDRESS, None

        address = (dto.address or "").strip()
        if not address:
            errors.setdefault("address", []).append(
                "Address is required for delivery orders."
            )

        driver_id = (dto.delivery_person_id or "").strip()
        if not driver_id:
            errors.setdefault("delivery_person_id", []).append(
                "A delivery person is required for delivery orders."
            )
        elif self._drivers.get_by_id(driver_id) is None:
            errors.setdefault("delivery_person_id", []).append(
                f"Delivery person {driver_id} not found."
            )
        return address, driver_id or None

    def _price_lines(
        self, dto: CreateOrderDTO, errors: Dict[str, List[str]]
    ) -> List[PricedLine]:
        menu_items = self._menu_items.get_many(line.menu_item_id for line in dto.items)
        categories = {
            name.lower(): category for name, category in self._categories.by_name().items()
        }

        lines: List[PricedLine] = []
        for index, line in enumerate(dto.items):
            key = f"items.{index}"
            item = menu_items.get(_canonical_id(line.menu_item_id))
            if item is None:
                errors.setdefault(key, []).append(
                    f"Menu item {line.menu_item_id} not found."
                )
                continue
            if not item.available:
                errors.setdefault(key, []).append(f"{item.name} is not available.")
                continue
            category = categories.get(item.category.lower())
            if category is None:
                errors.setdefault(key, []).append(
                    f"Category '{item.category}' of {item.name} not found."
                )
                continue
            try:
                unit_price = resolve_price(item, line.size, category, line.quantity)
            except PricingRejected as exc:
                errors.setdefault(key, []).append(exc.reason)
                continue
            if unit_price * line.quantity > MAX_AMOUNT:
                errors.setdefault(key, []).append(
                    f"Subtotal for {item.name} exceeds {MAX_AMOUNT}."
                )
                continue
            lines.append(
                PricedLine(
                    menu_item_id=str(item.id),
                    name=item.name,
                    size=normalize_size(line.size),
                    quantity=line.quantity,
                    unit_price=unit_price,
                )
            )
        return lines
