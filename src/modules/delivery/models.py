"""DeliveryPerson model.

Business rules implemented:
- Driver names are unique, compared case-insensitively (enforced at
  service layer so soft-deleted drivers free their name).
- Passwords are stored hashed with Django's password hashers.
- Deleting a driver is a soft-delete; orders keep their
  ``delivery_person_id`` untouched.
"""

from __future__ import annotations

import structlog
from django.contrib.auth.hashers import check_password, make_password
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class DeliveryPerson(SoftDeleteModel):
    """A delivery driver.

    Instances double as the authenticated principal of driver-session
    requests, hence ``is_authenticated``.
    """

    name = models.CharField(max_length=100)
    password = models.CharField(max_length=128)

    # DRF checks
    is_authenticated = True
    is_active = True

    class Meta:
        db_table = "delivery_people"
        ordering = ["name"]
        verbose_name_plural = "delivery people"

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)

    def __str__(self) -> str:
        return self.name
