"""Delivery service layer (Use Cases).

Driver maintenance for the admin and credential checks for the driver
login.  Orders reference drivers only by id; nothing here touches them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog
from django.db import transaction

from modules.delivery.exceptions import (
    DeliveryPersonAlreadyExists,
    DeliveryPersonNotFound,
    InvalidCredentials,
)
from modules.delivery.models import DeliveryPerson

if TYPE_CHECKING:
    from modules.delivery.dtos import (
        CreateDeliveryPersonDTO,
        DriverLoginDTO,
        UpdateDeliveryPersonDTO,
    )
    from modules.delivery.repositories.interfaces import IDeliveryPersonRepository

logger = structlog.get_logger(__name__)


class DeliveryPersonService:
    """Application service for DeliveryPerson use-cases."""

    def __init__(self, repository: IDeliveryPersonRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_delivery_people(self) -> List[DeliveryPerson]:
        return self._repository.list()

    def get_delivery_person(self, id: str) -> DeliveryPerson:
        driver = self._repository.get_by_id(id)
        if not driver:
            raise DeliveryPersonNotFound(f"Delivery person {id} not found.")
        return driver

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_delivery_person(self, dto: CreateDeliveryPersonDTO) -> DeliveryPerson:
        """Raises ``DeliveryPersonAlreadyExists`` if the name is taken."""
        if self._repository.get_by_name(dto.name):
            raise DeliveryPersonAlreadyExists(
                f"Delivery person '{dto.name}' already exists."
            )
        driver = DeliveryPerson(name=dto.name)
        driver.set_password(dto.password)
        driver = self._repository.save(driver)
        logger.info("delivery_person.created", delivery_person_id=str(driver.id))
        return driver

    @transaction.atomic
    def update_delivery_person(
        self, id: str, dto: UpdateDeliveryPersonDTO
    ) -> DeliveryPerson:
        """Rename a driver and/or reset their password."""
        driver = self.get_delivery_person(id)
        if dto.name is not None and dto.name.lower() != driver.name.lower():
            if self._repository.get_by_name(dto.name):
                raise DeliveryPersonAlreadyExists(
                    f"Delivery person '{dto.name}' already exists."
                )
        if dto.name is not None:
            driver.name = dto.name
        if dto.password is not None:
            driver.set_password(dto.password)
        driver = self._repository.save(driver)
        logger.info("delivery_person.updated", delivery_person_id=str(id))
        return driver

    @transaction.atomic
    def delete_delivery_person(self, id: str) -> None:
        self.get_delivery_person(id)
        self._repository.delete(id)
        logger.info("delivery_person.deleted", delivery_person_id=str(id))

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def authenticate(self, dto: DriverLoginDTO) -> DeliveryPerson:
        """Match name (case-insensitive) and password.

        Raises:
            InvalidCredentials: unknown name or wrong password.
        """
        driver = self._repository.get_by_name(dto.name)
        if driver is None:
            # Run the hasher anyway so unknown names take as long as bad passwords.
            DeliveryPerson().set_password(dto.password)
            logger.warning("driver.login_failed", reason="unknown_name")
            raise InvalidCredentials("Nombre o contraseña incorrectos.")
        if not driver.check_password(dto.password):
            logger.warning(
                "driver.login_failed",
                reason="bad_password",
                delivery_person_id=str(driver.id),
            )
            raise InvalidCredentials("Nombre o contraseña incorrectos.")
        logger.info("driver.logged_in", delivery_person_id=str(driver.id))
        return driver
