"""Unit tests for cached views and their invalidation."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from modules.core.cache import (
    CachedView,
    get_or_build,
    invalidate,
    schedule_invalidation,
    view_cache_key,
)
from modules.core.tasks import invalidate_views

pytestmark = pytest.mark.unit


def test_get_or_build_builds_once():
    calls = []

    def build():
        calls.append(1)
        return {"orders": []}

    key = view_cache_key(CachedView.KITCHEN)
    assert get_or_build(key, build) == {"orders": []}
    assert get_or_build(key, build) == {"orders": []}
    assert len(calls) == 1


def test_invalidate_moves_every_scoped_key():
    kitchen = view_cache_key(CachedView.KITCHEN)
    driver_a = view_cache_key(CachedView.DRIVERS, "a")
    driver_b = view_cache_key(CachedView.DRIVERS, "b")

    assert invalidate([CachedView.DRIVERS]) == [CachedView.DRIVERS]

    assert view_cache_key(CachedView.KITCHEN) == kitchen
    assert view_cache_key(CachedView.DRIVERS, "a") != driver_a
    assert view_cache_key(CachedView.DRIVERS, "b") != driver_b


def test_invalidated_payload_is_rebuilt():
    get_or_build(view_cache_key(CachedView.HOME, "menu"), lambda: "old")
    invalidate([CachedView.HOME])
    assert get_or_build(view_cache_key(CachedView.HOME, "menu"), lambda: "new") == "new"


def test_repeated_invalidation_keeps_counting():
    invalidate([CachedView.STATISTICS])
    first = view_cache_key(CachedView.STATISTICS)
    invalidate([CachedView.STATISTICS])
    assert view_cache_key(CachedView.STATISTICS) != first


def test_task_invalidates_views():
    before = view_cache_key(CachedView.STATISTICS)
    assert invalidate_views.delay([CachedView.STATISTICS]).get() == [CachedView.STATISTICS]
    assert view_cache_key(CachedView.STATISTICS) != before


def test_schedule_invalidation_waits_for_commit(django_capture_on_commit_callbacks):
    with patch("modules.core.tasks.invalidate_views.delay") as delay:
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            schedule_invalidation({CachedView.KITCHEN, CachedView.HOME})
        delay.assert_not_called()

        for callback in callbacks:
            callback()

    delay.assert_called_once_with([CachedView.KITCHEN, CachedView.HOME])


def test_schedule_nothing():
    with patch("modules.core.tasks.invalidate_views.delay") as delay:
        schedule_invalidation([])
    delay.assert_not_called()


def test_every_view_is_backed_by_a_cached_endpoint():
    assert set(CachedView.values) == {"home", "cocina", "repartidores", "estadisticas"}


def test_catalog_edits_invalidate_menu_and_statistics():
    from modules.catalog.services import CATALOG_AFFECTED_VIEWS

    assert CATALOG_AFFECTED_VIEWS == {CachedView.HOME, CachedView.STATISTICS}
