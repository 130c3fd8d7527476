from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Fixed-size ring buffer for streaming data.
    New values go in at the head; the oldest entry is overwritten when full.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._data: list[T | None] = [None] * capacity
        # Physical slot of the newest element.
        self._head = -1
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, item: T) -> None:
        """Insert ``item`` as the newest element, evicting the oldest when full."""
        self._head = (self._head + 1) % self._capacity
        self._data[self._head] = item
        if self._size < self._capacity:
            self._size += 1

    def clear(self) -> None:
        self._data = [None] * self._capacity
        self._head = -1
        self._size = 0

    def __len__(self) -> int:  # pragma: no cover - trivial
        return self._size

    def __getitem__(self, index: int) -> T:
        """Index the *logical* contents: ``buf[0]`` is the newest, ``buf[-1]`` the oldest."""
        size = self._size
        if size == 0:
            raise IndexError("RingBuffer is empty")

        if index < 0:
            index += size

        if index < 0 or index >= size:
            raise IndexError("RingBuffer index out of range")

        physical = (self._head - index) % self._capacity
        return self._data[physical]  # type: ignore[return-value]

    def __iter__(self) -> Iterator[T]:
        for i in range(self._size):
            yield self._data[(self._head - i) % self._capacity]  # type: ignore[misc]

    def latest(self) -> Optional[T]:
        """Return the newest element, or ``None`` if the buffer is empty."""
        if self._size == 0:
            return None
        return self._data[self._head]

    def snapshot(self, *, oldest_first: bool = False) -> list[T]:
        """
        Return a copy of the contents.

        Newest-first by default; pass ``oldest_first=True`` for chronological
        (left-to-right) plotting.
        """
        items = list(self)
        if oldest_first:
            items.reverse()
        return items
