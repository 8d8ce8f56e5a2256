from __future__ import annotations

import time
from dataclasses import dataclass


def now_ms() -> float:
    """Wall-clock time in milliseconds since the epoch."""
    return time.time() * 1000.0


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached value stamped with its insertion time and time-to-live.

    Attributes:
        key: Identifier, unique within its store.
        data: Opaque payload.
        created_at: Insertion (or last overwrite) time, epoch milliseconds.
        ttl: Lifetime in milliseconds.
    """

    key: str
    data: object
    created_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl

    def is_live(self, now: float) -> bool:
        """An entry stays live up to and including ``created_at + ttl``."""
        return now - self.created_at <= self.ttl
