"""Driver session authentication for Django REST Framework.

A successful driver login sets the ``driver_session`` cookie to a
PyJWT HS256 token signed with ``SECRET_KEY``.  The token carries the
driver id (``sub``) and expires after ``DRIVER_SESSION_LIFETIME``.

Security decisions
------------------
* ``algorithms`` is hard-coded to HS256, never read from the token.
* Tokens carry a ``typ`` claim so staff JWTs signed with the same key
  are not accepted as driver sessions.
* A token for a deleted driver resolves to no session.
"""

from __future__ import annotations

from typing import Optional

import jwt as pyjwt
import structlog
from django.conf import settings
from django.utils import timezone
from jwt.exceptions import PyJWTError
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from modules.delivery.models import DeliveryPerson
from modules.delivery.repositories.django_repository import (
    DeliveryPersonDjangoRepository,
)

logger = structlog.get_logger(__name__)

DRIVER_SESSION_ALGORITHM = "HS256"
DRIVER_SESSION_TYPE = "driver_session"


def issue_session_token(driver: DeliveryPerson) -> str:
    """Return a signed session token for *driver*."""
    now = timezone.now()
    payload = {
        "sub": str(driver.id),
        "typ": DRIVER_SESSION_TYPE,
        "iat": now,
        "exp": now + settings.DRIVER_SESSION_LIFETIME,
    }
    return pyjwt.encode(payload, settings.SECRET_KEY, algorithm=DRIVER_SESSION_ALGORITHM)


def resolve_driver_session(token: Optional[str]) -> Optional[DeliveryPerson]:
    """Map a session token to its driver, or ``None`` if it is not valid."""
    if not token:
        return None
    try:
        payload = pyjwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[DRIVER_SESSION_ALGORITHM],
            options={"require": ["sub", "exp", "typ"]},
        )
    except PyJWTError as exc:
        logger.info("driver_session.rejected", error=str(exc))
        return None
    if payload.get("typ") != DRIVER_SESSION_TYPE:
        return None
    return DeliveryPersonDjangoRepository().get_by_id(payload["sub"])


class DriverSessionAuthentication(BaseAuthentication):
    """Authenticate requests carrying a ``driver_session`` cookie.

    Returns ``None`` when no cookie is present so other backends can try;
    a cookie that does not resolve to a driver is a 401.
    """

    def authenticate(self, request):
        token = request.COOKIES.get(settings.DRIVER_SESSION_COOKIE)
        if not token:
            return None
        driver = resolve_driver_session(token)
        if driver is None:
            raise AuthenticationFailed("Sesión de repartidor inválida o expirada.")
        structlog.contextvars.bind_contextvars(delivery_person_id=str(driver.id))
        return (driver, token)

    def authenticate_header(self, request):
        return 'Cookie realm="driver"'
