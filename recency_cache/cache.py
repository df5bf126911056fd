"""Fixed-capacity LRU cache.

A ``dict`` index maps each key to its slot in a :class:`RecencyList`, so both
key lookup and finding the least-recently-used entry are O(1).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Generic, Hashable, Iterator, Tuple, TypeVar

from .recency_list import NIL, RecencyList
from .types import CacheStats

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class InvalidCapacityError(ValueError):
    """Raised when a cache is built with a non-positive or non-integer capacity."""


class CacheInvariantError(RuntimeError):
    """Raised by ``check_invariants`` when the index and recency list disagree."""


class LRUCache(Generic[K, V]):
    """LRU cache with O(1) ``get`` and ``put``.

    Reading a key with :meth:`get` or writing it with :meth:`put` makes it the
    most recently used entry. When a ``put`` for a new key finds the cache
    full, the least recently used entry is evicted first.

    Not thread-safe: concurrent callers must hold one lock per call.
    """

    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise InvalidCapacityError(
                f"capacity must be an integer, got {type(capacity).__name__}"
            )
        if capacity <= 0:
            raise InvalidCapacityError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._index: Dict[K, int] = {}
        self._recency = RecencyList()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __repr__(self) -> str:
        return f"LRUCache(capacity={self._capacity}, size={len(self)})"

    def get(self, key: K, default: Any = None) -> V | Any:
        """Return the value for ``key`` and mark it most recently used.

        Args:
            key: Cache key to look up
            default: Returned on a miss (``None`` unless given)

        Returns:
            The cached value, or ``default`` if the key is absent
        """
        slot = self._index.get(key, NIL)
        if slot == NIL:
            self._misses += 1
            return default
        self._hits += 1
        self._recency.move_to_head(slot)
        return self._recency.entry(slot).value

    def put(self, key: K, value: V) -> None:
        """Insert or update ``key`` and mark it most recently used.

        Args:
            key: Cache key
            value: Value to cache
        """
        slot = self._index.get(key, NIL)
        if slot != NIL:
            self._recency.entry(slot).value = value
            self._recency.move_to_head(slot)
            return

        if len(self._index) >= self._capacity:
            self._evict_tail()

        slot = self._recency.allocate(key, value)
        self._recency.insert_at_head(slot)
        self._index[key] = slot

    def peek(self, key: K, default: Any = None) -> V | Any:
        """Return the value for ``key`` without touching recency order."""
        slot = self._index.get(key, NIL)
        if slot == NIL:
            return default
        return self._recency.entry(slot).value

    def keys(self) -> Iterator[K]:
        """Iterate keys from most to least recently used."""
        for slot in self._recency.iter_slots():
            yield self._recency.entry(slot).key

    def items(self) -> Iterator[Tuple[K, V]]:
        """Iterate ``(key, value)`` pairs from most to least recently used."""
        for slot in self._recency.iter_slots():
            entry = self._recency.entry(slot)
            yield entry.key, entry.value

    def mru_key(self) -> K | None:
        if self._recency.head == NIL:
            return None
        return self._recency.entry(self._recency.head).key

    def lru_key(self) -> K | None:
        if self._recency.tail == NIL:
            return None
        return self._recency.entry(self._recency.tail).key

    def clear(self) -> None:
        """Remove every entry. Capacity and counters are kept."""
        self._index.clear()
        self._recency.clear()
        logger.debug("Cache cleared (capacity=%d)", self._capacity)

    def stats(self) -> CacheStats:
        return CacheStats(
            capacity=self._capacity,
            size=len(self._index),
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    def reset_stats(self) -> None:
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def check_invariants(self) -> None:
        """Verify the index and recency list agree.

        Raises:
            CacheInvariantError: listing every violation found
        """
        errors = self._recency.link_errors()
        if len(self._index) != len(self._recency):
            errors.append(
                f"index holds {len(self._index)} keys, "
                f"recency list holds {len(self._recency)}"
            )
        if len(self._index) > self._capacity:
            errors.append(
                f"size {len(self._index)} exceeds capacity {self._capacity}"
            )
        if not errors:
            for key, slot in self._index.items():
                try:
                    entry = self._recency.entry(slot)
                except KeyError:
                    errors.append(f"key {key!r} indexes free slot {slot}")
                    continue
                if entry.key != key:
                    errors.append(
                        f"key {key!r} indexes slot {slot} holding {entry.key!r}"
                    )
        if errors:
            raise CacheInvariantError("; ".join(errors))

    def _evict_tail(self) -> None:
        slot = self._recency.tail
        self._recency.unlink(slot)
        entry = self._recency.release(slot)
        del self._index[entry.key]
        self._evictions += 1
        logger.debug("Evicted LRU key %r (capacity=%d)", entry.key, self._capacity)
