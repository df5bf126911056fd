"""Arena-backed doubly-linked recency list.

Entries live in a flat list and refer to their neighbours by slot index
instead of by object reference. ``NIL`` marks a missing neighbour, an empty
head/tail, or a free slot.

Only :meth:`RecencyList.unlink` and :meth:`RecencyList.insert_at_head` touch
the ``prev``/``next`` links of live entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List

NIL = -1


@dataclass
class Entry:
    """One cached key-value pair and its position in recency order."""

    key: Any
    value: Any
    prev: int = NIL
    next: int = NIL


class RecencyList:
    """Entries ordered from most-recently-used (head) to least (tail)."""

    def __init__(self) -> None:
        self._slots: List[Entry | None] = []
        self._free: List[int] = []
        self.head = NIL
        self.tail = NIL
        self._size = 0
        self._mutations = 0

    def __len__(self) -> int:
        return self._size

    def allocate(self, key: Any, value: Any) -> int:
        """Store a new detached entry and return its slot."""
        entry = Entry(key=key, value=value)
        if self._free:
            slot = self._free.pop()
            self._slots[slot] = entry
        else:
            slot = len(self._slots)
            self._slots.append(entry)
        return slot

    def release(self, slot: int) -> Entry:
        """Free a detached slot for reuse and return the entry it held."""
        entry = self.entry(slot)
        self._slots[slot] = None
        self._free.append(slot)
        return entry

    def entry(self, slot: int) -> Entry:
        entry = self._lookup(slot)
        if entry is None:
            raise KeyError(f"slot {slot} is not allocated")
        return entry

    def _lookup(self, slot: int) -> Entry | None:
        if 0 <= slot < len(self._slots):
            return self._slots[slot]
        return None

    def unlink(self, slot: int) -> None:
        """Splice the entry at ``slot`` out of the list."""
        entry = self.entry(slot)
        if entry.prev != NIL:
            self.entry(entry.prev).next = entry.next
        else:
            self.head = entry.next
        if entry.next != NIL:
            self.entry(entry.next).prev = entry.prev
        else:
            self.tail = entry.prev
        entry.prev = NIL
        entry.next = NIL
        self._size -= 1
        self._mutations += 1

    def insert_at_head(self, slot: int) -> None:
        """Link a detached entry in as the most-recently-used one."""
        entry = self.entry(slot)
        entry.prev = NIL
        entry.next = self.head
        if self.head != NIL:
            self.entry(self.head).prev = slot
        self.head = slot
        if self.tail == NIL:
            self.tail = slot
        self._size += 1
        self._mutations += 1

    def move_to_head(self, slot: int) -> None:
        if slot == self.head:
            return
        self.unlink(slot)
        self.insert_at_head(slot)

    def iter_slots(self) -> Iterator[int]:
        """Yield live slots from head to tail.

        Raises:
            RuntimeError: if the list is relinked or cleared mid-walk
        """
        mutations = self._mutations
        slot = self.head
        while slot != NIL:
            yield slot
            if self._mutations != mutations:
                raise RuntimeError("cache mutated during iteration")
            slot = self.entry(slot).next

    def clear(self) -> None:
        self._slots.clear()
        self._free.clear()
        self.head = NIL
        self.tail = NIL
        self._size = 0
        self._mutations += 1

    def link_errors(self) -> List[str]:
        """Return descriptions of every broken link invariant (empty if sound)."""
        errors: List[str] = []
        if self._size == 0:
            if self.head != NIL or self.tail != NIL:
                errors.append(
                    f"empty list has head={self.head} tail={self.tail}"
                )
            return errors
        if self.head == NIL or self.tail == NIL:
            errors.append(f"non-empty list has head={self.head} tail={self.tail}")
            return errors

        live = sum(1 for entry in self._slots if entry is not None)
        if live != self._size:
            errors.append(f"{live} allocated slots but size is {self._size}")

        head = self._lookup(self.head)
        tail = self._lookup(self.tail)
        if head is None or tail is None:
            errors.append(f"head={self.head} or tail={self.tail} is not allocated")
            return errors
        if head.prev != NIL:
            errors.append(f"head slot {self.head} has a prev link")
        if tail.next != NIL:
            errors.append(f"tail slot {self.tail} has a next link")

        steps = 0
        previous = NIL
        slot = self.head
        while slot != NIL:
            if steps > self._size:
                errors.append("cycle detected walking from head")
                return errors
            entry = self._lookup(slot)
            if entry is None:
                errors.append(f"link points at free slot {slot}")
                return errors
            if entry.prev != previous:
                errors.append(
                    f"slot {slot} prev={entry.prev}, expected {previous}"
                )
            previous = slot
            slot = entry.next
            steps += 1

        if previous != self.tail:
            errors.append(f"walk from head ended at {previous}, tail is {self.tail}")
        if steps != self._size:
            errors.append(f"walk from head visited {steps} entries, size is {self._size}")
        return errors
