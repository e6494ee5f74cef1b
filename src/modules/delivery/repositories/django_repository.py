"""Django ORM implementation of the DeliveryPerson repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.delivery.models import DeliveryPerson
from modules.delivery.repositories.interfaces import IDeliveryPersonRepository

logger = structlog.get_logger(__name__)


class DeliveryPersonDjangoRepository(IDeliveryPersonRepository):
    """Concrete DeliveryPerson repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[DeliveryPerson]:
        """Return ``None`` for missing, deleted or malformed IDs."""
        try:
            return DeliveryPerson.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_name(self, name: str) -> Optional[DeliveryPerson]:
        return DeliveryPerson.objects.alive().filter(name__iexact=name.strip()).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[DeliveryPerson]:
        queryset = DeliveryPerson.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: DeliveryPerson) -> DeliveryPerson:
        entity.save()
        logger.info("delivery_person.saved", delivery_person_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        driver = self.get_by_id(id)
        if not driver:
            return False
        driver.delete()
        logger.info("delivery_person.soft_deleted", delivery_person_id=str(id))
        return True
