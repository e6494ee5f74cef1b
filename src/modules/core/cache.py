"""Cached read views and their invalidation.

Mutations in the order and catalog services report which views they
affect (``CachedView``); the API layer hands that set to
``schedule_invalidation`` which drops the cached payloads once the
surrounding transaction commits.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

import structlog
from django.conf import settings
from django.core.cache import cache
from django.db import models, transaction

logger = structlog.get_logger(__name__)

T = TypeVar("T")

CACHE_KEY_PREFIX = "views"


class CachedView(models.TextChoices):
    HOME = "home", "Menú"
    KITCHEN = "cocina", "Cocina"
    DRIVERS = "repartidores", "Repartidores"
    STATISTICS = "estadisticas", "Estadísticas"


def view_cache_key(view: str, *parts: object) -> str:
    """Return the cache key for *view*, optionally scoped by extra parts.

    Scoped keys (e.g. one per driver) share a version counter with the
    bare view key so a single invalidation drops all of them.
    """
    suffix = ":".join(str(p) for p in parts)
    base = f"{CACHE_KEY_PREFIX}:{view}:v{_view_version(view)}"
    return f"{base}:{suffix}" if suffix else base


def _version_key(view: str) -> str:
    return f"{CACHE_KEY_PREFIX}:{view}:version"


def _view_version(view: str) -> int:
    return cache.get(_version_key(view), 1)


def get_or_build(key: str, builder: Callable[[], T]) -> T:
    """Return the cached payload for *key*, building and storing it on a miss."""
    payload = cache.get(key)
    if payload is not None:
        logger.debug("view_cache.hit", key=key)
        return payload
    payload = builder()
    cache.set(key, payload, settings.VIEW_CACHE_TIMEOUT)
    logger.debug("view_cache.miss", key=key)
    return payload


def invalidate(views: Iterable[str]) -> list[str]:
    """Bump the version of every view in *views*; returns the views touched."""
    touched = sorted({str(v) for v in views})
    for view in touched:
        version_key = _version_key(view)
        if cache.add(version_key, 2, None):
            continue
        try:
            cache.incr(version_key)
        except ValueError:
            # Expired between add() and incr(); start over.
            cache.set(version_key, 2, None)
    if touched:
        logger.info("view_cache.invalidated", views=touched)
    return touched


def schedule_invalidation(views: Iterable[str]) -> None:
    """Invalidate *views* asynchronously after the current transaction commits."""
    from modules.core.tasks import invalidate_views

    names = sorted({str(v) for v in views})
    if not names:
        return
    transaction.on_commit(lambda: invalidate_views.delay(names))
