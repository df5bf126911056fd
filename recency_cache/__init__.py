"""Fixed-capacity least-recently-used cache.

Public API:
- LRUCache
- CacheStats
- build_cache / load_settings / load_cache_config
- replay_operations
"""

from .cache import CacheInvariantError, InvalidCapacityError, LRUCache
from .config import (
    DEFAULT_CAPACITY,
    CacheConfigError,
    build_cache,
    load_cache_config,
    load_settings,
)
from .recency_list import NIL, Entry, RecencyList
from .replay import TraceError, replay_operations
from .types import CacheStats

__all__ = [
    "CacheConfigError",
    "CacheInvariantError",
    "CacheStats",
    "DEFAULT_CAPACITY",
    "Entry",
    "InvalidCapacityError",
    "LRUCache",
    "NIL",
    "RecencyList",
    "TraceError",
    "build_cache",
    "load_cache_config",
    "load_settings",
    "replay_operations",
]
