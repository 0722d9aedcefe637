# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Fixed-capacity FIFO used by the dump-on-trigger policy."""

from collections import deque
from typing import Any


class RingBuffer:
    """Bounded FIFO of buffered log entries.

    When full, pushing a new entry evicts the oldest one. The buffer does no
    locking of its own: the owning worker mutates it under its lock.
    """

    def __init__(self, capacity: int = 32):
        if capacity < 1:
            raise ValueError(f"Ring buffer capacity must be positive, got {capacity}")
        self._items: deque[Any] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def __len__(self) -> int:
        return len(self._items)

    def push(self, item: Any) -> None:
        self._items.append(item)

    def peek(self) -> Any | None:
        """Return the oldest entry without removing it, or None when empty."""
        if not self._items:
            return None
        return self._items[0]

    def pop(self) -> Any | None:
        """Remove and return the oldest entry, or None when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def drain(self) -> list[Any]:
        """Remove and return every buffered entry, oldest first."""
        items = list(self._items)
        self._items.clear()
        return items

    def items(self) -> list[Any]:
        return list(self._items)

    def set_capacity(self, capacity: int) -> None:
        """Resize the buffer, keeping the most recent entries that still fit."""
        if capacity < 1:
            raise ValueError(f"Ring buffer capacity must be positive, got {capacity}")
        self._items = deque(self._items, maxlen=capacity)
