"""Small in-memory TTL cache for quote lookups."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable


@dataclass
class _Entry:
    value: object
    expires_at: float


class TTLCache:
    """Thread-safe string-keyed cache; expired entries are dropped lazily or on :meth:`prune`."""

    def __init__(self, default_ttl_seconds: int = 60, clock: Callable[[], float] = time.time) -> None:
        self.default_ttl_seconds = max(1, default_ttl_seconds)
        self._clock = clock
        self._data: dict[str, _Entry] = {}
        self._lock = Lock()

    def get(self, key: str) -> object | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._data[key]
                return None
            return entry.value

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else max(1, ttl_seconds)
        with self._lock:
            self._data[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def prune(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._data.items() if entry.expires_at <= now]
            for key in expired:
                del self._data[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
