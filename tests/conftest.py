from __future__ import annotations

import pytest

from recency_cache import LRUCache


@pytest.fixture
def scenario_cache() -> LRUCache:
    """Capacity-2 cache holding 1 -> "a" and 2 -> "b" (2 is most recent)."""
    cache = LRUCache(2)
    cache.put(1, "a")
    cache.put(2, "b")
    return cache


@pytest.fixture(autouse=True)
def _isolated_cache_env(monkeypatch):
    for name in (
        "RECENCY_CACHE_CAPACITY",
        "RECENCY_CACHE_LOG_LEVEL",
        "RECENCY_CACHE_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)
