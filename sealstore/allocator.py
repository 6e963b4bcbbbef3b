"""Reference-counted slot allocation with an automatically growing pool."""

from __future__ import annotations

import threading
from collections import Counter, deque
from collections.abc import Iterable

FREE_SLOTS_MIN_RESERVE = 1024
"""The pool grows whenever fewer than this many free slots remain."""


class Allocator:
    """Hand out slot indices and track how many references each slot has.

    A slot whose reference count drops to zero goes back to the free pool,
    which is served first in, first out.
    """

    def __init__(self, link_counter: Iterable[int]) -> None:
        self._lock = threading.Lock()
        self._counts = list(link_counter)
        if any(count < 0 for count in self._counts):
            raise ValueError("reference counts cannot be negative")
        self._free = deque(slot for slot, count in enumerate(self._counts) if count == 0)
        if len(self._free) < FREE_SLOTS_MIN_RESERVE:
            self._grow()

    def _grow(self) -> None:
        start = len(self._counts)
        self._counts.extend([0] * FREE_SLOTS_MIN_RESERVE)
        self._free.extend(range(start, start + FREE_SLOTS_MIN_RESERVE))

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < len(self._counts):
            raise IndexError(f"slot {slot} is out of range")

    def pop(self) -> int:
        """Take a free slot, give it one reference and return its index."""
        with self._lock:
            if len(self._free) < FREE_SLOTS_MIN_RESERVE:
                self._grow()
            slot = self._free.popleft()
            self._counts[slot] += 1
            return slot

    def inc(self, slot: int) -> None:
        """Add a reference to ``slot``."""
        with self._lock:
            self._check_slot(slot)
            self._counts[slot] += 1

    def inc_many(self, slots: Iterable[int]) -> None:
        """Add a reference to each slot listed."""
        slots = list(slots)
        with self._lock:
            for slot in slots:
                self._check_slot(slot)
            for slot in slots:
                self._counts[slot] += 1

    def dec(self, slot: int) -> None:
        """Drop a reference to ``slot``, freeing it when none remain."""
        with self._lock:
            self._check_slot(slot)
            if self._counts[slot] == 0:
                raise ValueError(f"slot {slot} has no references")
            self._counts[slot] -= 1
            if self._counts[slot] == 0:
                self._free.append(slot)

    def dec_many(self, slots: Iterable[int]) -> None:
        """Drop a reference to each slot listed, freeing those left unreferenced."""
        slots = list(slots)
        with self._lock:
            for slot, times in Counter(slots).items():
                self._check_slot(slot)
                if self._counts[slot] < times:
                    raise ValueError(f"slot {slot} has too few references")
            freed = []
            for slot in slots:
                self._counts[slot] -= 1
                if self._counts[slot] == 0:
                    freed.append(slot)
            self._free.extend(freed)

    def __getitem__(self, slot: int) -> int:
        """Current reference count of ``slot``."""
        with self._lock:
            self._check_slot(slot)
            return self._counts[slot]

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)