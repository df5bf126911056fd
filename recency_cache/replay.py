"""Replay operation traces against an :class:`LRUCache`.

Traces use two parallel lists, one with operation names and one with their
argument lists::

    ["LRUCache", "put", "put", "get"]
    [[2], [1, 1], [2, 2], [1]]

The first operation constructs the cache; the rest are applied in order.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence, Tuple

from .cache import LRUCache

logger = logging.getLogger(__name__)

CONSTRUCTOR = "LRUCache"
_ARITY = {"get": 1, "put": 2}


class TraceError(ValueError):
    """Raised when a trace is structurally invalid."""


def replay_operations(
    operations: Sequence[str],
    arguments: Sequence[Sequence[Any]],
) -> Tuple[List[Any], LRUCache]:
    """Apply a trace and collect each operation's output.

    Args:
        operations: Operation names, starting with ``"LRUCache"``
        arguments: One argument list per operation

    Returns:
        (outputs, cache). ``outputs`` has one item per operation: ``None``
        for the constructor and ``put``, the looked-up value (or ``None``)
        for ``get``.

    Raises:
        TraceError: if the trace is malformed
        InvalidCapacityError: if the constructor capacity is not positive
    """
    if len(operations) != len(arguments):
        raise TraceError(
            f"{len(operations)} operations but {len(arguments)} argument lists"
        )
    if not operations or operations[0] != CONSTRUCTOR:
        raise TraceError(f"trace must start with {CONSTRUCTOR!r}")
    if len(arguments[0]) != 1:
        raise TraceError(f"{CONSTRUCTOR} takes exactly 1 argument (capacity)")

    cache: LRUCache = LRUCache(arguments[0][0])
    outputs: List[Any] = [None]

    for position, (name, args) in enumerate(
        zip(operations[1:], arguments[1:]), start=1
    ):
        if name == CONSTRUCTOR:
            raise TraceError(f"operation {position}: {CONSTRUCTOR} may only appear first")
        if not isinstance(name, str) or name not in _ARITY:
            raise TraceError(f"operation {position}: unknown operation {name!r}")
        if len(args) != _ARITY[name]:
            raise TraceError(
                f"operation {position}: {name} takes {_ARITY[name]} "
                f"argument(s), got {len(args)}"
            )
        try:
            hash(args[0])
        except TypeError as exc:
            raise TraceError(
                f"operation {position}: key {args[0]!r} is not hashable"
            ) from exc
        if name == "get":
            outputs.append(cache.get(args[0]))
        else:
            cache.put(args[0], args[1])
            outputs.append(None)

    logger.debug(
        "Replayed %d operations: %s", len(operations), cache.stats().to_dict()
    )
    return outputs, cache
