"""In-memory snapshot cache for collection arrays."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple


class TTLCache:
    """Per-collection snapshots that expire after ``ttl_seconds``.

    Owned by a store instance; two stores never share entries.
    """

    def __init__(self, ttl_seconds: float = 5.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[list, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[list]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                return None
            return value

    def set(self, key: str, value: list) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())

    def clear(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
