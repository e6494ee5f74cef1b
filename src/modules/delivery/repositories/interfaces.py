"""Delivery repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.delivery.models import DeliveryPerson


class IDeliveryPersonRepository(IRepository["DeliveryPerson"]):
    """Repository contract for drivers (soft-deleted rows are invisible)."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[DeliveryPerson]:
        """Retrieve a live driver by case-insensitive name."""
