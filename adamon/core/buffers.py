from __future__ import annotations

import threading
from typing import Generic, List, Optional, TypeVar


T = TypeVar("T")


class WindowBuffer(Generic[T]):
    """Thread-safe bounded buffer that is drained whenever it reaches its target length.

    The target may change between windows; it never holds more items than the
    current target.
    """

    def __init__(self, target: int) -> None:
        if target < 1:
            raise ValueError("window target must be >= 1")
        self._target: int = target
        self._items: List[T] = []
        self._lock = threading.RLock()

    def add(self, item: T) -> Optional[List[T]]:
        """Append an item; return the completed window (and clear) once the target is reached."""
        with self._lock:
            self._items.append(item)
            if len(self._items) >= self._target:
                window = self._items
                self._items = []
                return window
            return None

    def size(self) -> int:
        with self._lock:
            return len(self._items)

    def target(self) -> int:
        with self._lock:
            return self._target

    def set_target(self, target: int) -> None:
        if target < 1:
            raise ValueError("window target must be >= 1")
        with self._lock:
            self._target = target
