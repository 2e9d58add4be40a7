"""In-memory TTL cache with lazy eviction."""
from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Protocol

DEFAULT_TTL_SECONDS = 60


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class CacheBackend(Protocol):
    """Operations the lookup service needs from a cache."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None: ...

    def has(self, key: str) -> bool: ...

    def delete(self, key: str) -> bool: ...


class TTLCache:
    """Thread-safe TTL cache shared by every request in the process.

    Expiration is checked on read, so an entry past its deadline is never
    returned even if ``sweep`` has not run yet. ``sweep`` only reclaims memory.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(self._clock()):
                del self._store[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        with self._lock:
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and entry.is_fresh(self._clock())

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""

        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._store.items() if not entry.is_fresh(now)]
            for key in expired:
                del self._store[key]
        return len(expired)
