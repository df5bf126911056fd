"""Shared datatypes for the cache package."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time counters for an :class:`~recency_cache.cache.LRUCache`."""

    capacity: int
    size: int
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["hit_rate"] = self.hit_rate
        return payload
