"""Two-tier cache facade.

The manager is the single entry point application code uses. It routes every
key to either the in-process store or the SQLite-backed store, fills in the
namespace's default TTL, and runs a background sweep over both stores.

Build one at application start and pass it to whatever needs it:

    with create_cache_manager() as cache:
        cache.set("buildings:list", buildings)
        cache.get("buildings:list")

Nothing here raises for storage failures. A broken durable medium degrades to
misses and no-ops.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Self

from archi_cache.cache.router import StrategyRouter, Tier
from archi_cache.cache.sweeper import DEFAULT_SWEEP_INTERVAL_SECONDS, PeriodicSweeper

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from archi_cache.cache.memory_store import MemoryCacheStore
    from archi_cache.cache.protocol import CacheStore
    from archi_cache.cache.router import Route
    from archi_cache.cache.sqlite_store import SqliteCacheStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheStats:
    volatile_count: int
    volatile_max: int
    durable_bytes: int
    durable_max_bytes: int


@dataclass(frozen=True, slots=True)
class SweepReport:
    volatile_removed: int
    durable_removed: int


class CacheManager:
    """Routes cache operations to the volatile or durable tier.

    Args:
        volatile: In-process store for ephemeral state.
        durable: Persisted store for data worth keeping across restarts.
        router: Key classification. Defaults to the built-in tables.
        sweep_interval_seconds: Period of the background expiry sweep.
        start_sweeper: Start the background sweep immediately. Short-lived
            callers such as the CLI turn this off and call ``sweep()`` directly.
    """

    def __init__(
        self,
        volatile: MemoryCacheStore,
        durable: SqliteCacheStore,
        router: StrategyRouter | None = None,
        *,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        start_sweeper: bool = True,
    ) -> None:
        self._volatile = volatile
        self._durable = durable
        self._router = router or StrategyRouter()
        self._sweep_lock = threading.Lock()
        self._sweeper = PeriodicSweeper(self.sweep, sweep_interval_seconds)
        self._closed = False
        if start_sweeper:
            self._sweeper.start()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def durable_path(self) -> Path:
        return self._durable.db_path

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper.running

    def resolve(self, key: str) -> Route:
        return self._router.resolve(key)

    def set(self, key: str, data: object, ttl: float | None = None) -> None:
        """Store ``data`` under ``key``; ``ttl`` is in milliseconds."""
        route = self._router.resolve(key)
        if ttl is None:
            ttl = route.default_ttl
        self._store_for(route.tier).set(key, data, ttl)

    def get(self, key: str) -> object | None:
        return self._store_for(self._router.resolve(key).tier).get(key)

    def has(self, key: str) -> bool:
        return self._store_for(self._router.resolve(key).tier).has(key)

    def delete(self, key: str) -> bool:
        return self._store_for(self._router.resolve(key).tier).delete(key)

    def clear_all(self) -> None:
        """Empty both tiers, e.g. on logout."""
        self._volatile.clear()
        self._durable.clear()
        logger.info("Cleared volatile and durable cache tiers")

    def stats(self) -> CacheStats:
        return CacheStats(
            volatile_count=self._volatile.size(),
            volatile_max=self._volatile.max_size,
            durable_bytes=self._durable.size(),
            durable_max_bytes=self._durable.max_bytes,
        )

    def sweep(self) -> SweepReport | None:
        """Remove expired entries from both tiers.

        Returns None without doing anything if another sweep is in progress.
        """
        if not self._sweep_lock.acquire(blocking=False):
            logger.debug("Sweep already in progress, skipping")
            return None
        try:
            report = SweepReport(
                volatile_removed=self._volatile.cleanup(),
                durable_removed=self._durable.cleanup(),
            )
        finally:
            self._sweep_lock.release()
        if report.volatile_removed or report.durable_removed:
            logger.debug(
                "Sweep removed %d volatile and %d durable entries",
                report.volatile_removed,
                report.durable_removed,
            )
        return report

    def close(self) -> None:
        """Stop the background sweep and release durable connections."""
        if self._closed:
            return
        self._closed = True
        self._sweeper.stop()
        self._durable.close()

    def _store_for(self, tier: Tier) -> CacheStore:
        if tier is Tier.DURABLE:
            return self._durable
        return self._volatile
