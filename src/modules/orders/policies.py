"""Delay-until-ready policy.

The delay is advisory: it only feeds the ``estimated_time`` shown to
staff and customers.  Defaults come from settings and can differ per
delivery type; a type without its own value uses the general default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from django.conf import settings

from modules.orders.constants import DeliveryType


@dataclass(frozen=True)
class DelayPolicy:
    default_minutes: int
    per_delivery_type: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_settings(cls) -> DelayPolicy:
        per_type = {
            DeliveryType.RETIRO: getattr(settings, "ORDER_DELAY_PICKUP_MINUTES", None),
            DeliveryType.ENVIO: getattr(settings, "ORDER_DELAY_DELIVERY_MINUTES", None),
        }
        return cls(
            default_minutes=settings.ORDER_DELAY_DEFAULT_MINUTES,
            per_delivery_type={k: v for k, v in per_type.items() if v is not None},
        )

    def minutes_for(self, delivery_type: str, requested: Optional[int] = None) -> int:
        """An explicit request (including 0) wins over the configured defaults."""
        if requested is not None:
            return requested
        return self.per_delivery_type.get(delivery_type, self.default_minutes)
