"""Delivery domain exceptions."""

from __future__ import annotations


class DeliveryPersonNotFound(Exception):
    """The requested driver does not exist or has been deleted."""


class DeliveryPersonAlreadyExists(Exception):
    """Another driver already uses that name."""


class InvalidCredentials(Exception):
    """Driver name and password do not match."""
