from archi_cache.cache.entry import CacheEntry
from archi_cache.cache.factory import create_cache_manager
from archi_cache.cache.manager import CacheManager, CacheStats, SweepReport
from archi_cache.cache.memory_store import MemoryCacheStore
from archi_cache.cache.protocol import CacheStore
from archi_cache.cache.router import Route, StrategyRouter, Tier
from archi_cache.cache.sqlite_store import SqliteCacheStore
from archi_cache.cache.wrapper import cached_call

__all__ = [
    "CacheEntry",
    "CacheManager",
    "CacheStats",
    "CacheStore",
    "MemoryCacheStore",
    "Route",
    "SqliteCacheStore",
    "StrategyRouter",
    "SweepReport",
    "Tier",
    "cached_call",
    "create_cache_manager",
]
