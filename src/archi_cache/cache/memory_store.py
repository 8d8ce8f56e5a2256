from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from archi_cache.cache.entry import CacheEntry, now_ms

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 50


class MemoryCacheStore:
    """Bounded in-process store with FIFO eviction and lazy expiry.

    Entries live in an insertion-ordered dict. When a new key would push the
    store past ``max_size`` the oldest-inserted entry is dropped, regardless of
    how recently it was read. Overwriting a key keeps its original position.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, clock: Callable[[], float] = now_ms) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self._max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def set(self, key: str, data: object, ttl: float) -> None:
        entry = CacheEntry(key=key, data=data, created_at=self._clock(), ttl=ttl)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicted %s to make room for %s", oldest, key)
            self._entries[key] = entry

    def get(self, key: str) -> object | None:
        with self._lock:
            entry = self._live_entry(key)
            return None if entry is None else entry.data

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Swept %d expired entries from memory", len(expired))
        return len(expired)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def _live_entry(self, key: str) -> CacheEntry | None:
        # Caller holds the lock.
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_live(self._clock()):
            del self._entries[key]
            return None
        return entry
