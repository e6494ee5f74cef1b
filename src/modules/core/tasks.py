"""Background tasks of the core app: cached view invalidation."""

import structlog
from celery import shared_task

from modules.core.cache import invalidate

logger = structlog.get_logger(__name__)


@shared_task(name="core.invalidate_views")
def invalidate_views(views):
    """Drop cached payloads of the given views (menu, cocina, estadísticas...)."""
    touched = invalidate(views)
    logger.info("invalidate_views.executed", views=touched)
    return touched
