"""Delivery DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from modules.catalog.dtos import NonBlankStr


class CreateDeliveryPersonDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: NonBlankStr
    password: NonBlankStr


class UpdateDeliveryPersonDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[NonBlankStr] = None
    password: Optional[NonBlankStr] = None


class DriverLoginDTO(BaseModel):
    """Credentials posted to the driver login endpoint."""

    model_config = ConfigDict(frozen=True)

    name: NonBlankStr
    password: str
