"""API-wide exception handling.

Domain errors (validation, state transitions) are translated by each
view.  What reaches this handler unhandled is either a DRF exception,
which keeps DRF's default rendering, or an infrastructure failure
(database, cache, broker), which is logged and reported as a generic
503 so clients can tell it apart from a rejected request.
"""

from __future__ import annotations

import structlog
from django.db import DatabaseError
from kombu.exceptions import OperationalError as BrokerError
from redis.exceptions import RedisError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)

INFRASTRUCTURE_ERRORS = (DatabaseError, RedisError, BrokerError)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, INFRASTRUCTURE_ERRORS):
        view = context.get("view")
        logger.error(
            "api.infrastructure_failure",
            error_type=type(exc).__name__,
            error=str(exc),
            view=type(view).__name__ if view else None,
        )
        return Response(
            {"detail": "Servicio temporalmente no disponible."},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return None
