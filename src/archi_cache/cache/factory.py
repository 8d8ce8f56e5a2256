from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from archi_cache.cache.manager import CacheManager
from archi_cache.cache.memory_store import MemoryCacheStore
from archi_cache.cache.router import DEFAULT_TTL_CLASSES, StrategyRouter
from archi_cache.cache.sqlite_store import SqliteCacheStore

if TYPE_CHECKING:
    from archi_cache.config import AppConfig

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def _as_bool(name: str, raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _as_int(name: str, raw: object) -> int:
    try:
        return int(str(raw))
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _as_float(name: str, raw: object) -> float:
    try:
        return float(str(raw))
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def create_router(config: AppConfig | None = None) -> StrategyRouter:
    """Build a StrategyRouter whose TTL classes come from ``cache.ttl.*``."""
    if config is None:
        from archi_cache.config import create_config

        config = create_config()
    ttl_classes = {
        name: _as_int(f"cache.ttl.{name}", config[f"cache.ttl.{name}"]) for name in DEFAULT_TTL_CLASSES
    }
    return StrategyRouter(ttl_classes=ttl_classes)


def create_durable_store(config: AppConfig | None = None) -> SqliteCacheStore:
    """Build a SqliteCacheStore from the app config's ``cache.*`` keys."""
    if config is None:
        from archi_cache.config import create_config

        config = create_config()
    return SqliteCacheStore(
        Path(str(config["cache.db_path"])).expanduser(),
        prefix=str(config["cache.prefix"]),
        max_bytes=_as_int("cache.durable_max_bytes", config["cache.durable_max_bytes"]),
        enforce_max_bytes=_as_bool("cache.enforce_durable_max_bytes", config["cache.enforce_durable_max_bytes"]),
    )


def create_cache_manager(config: AppConfig | None = None, *, start_sweeper: bool = True) -> CacheManager:
    """Build the application's CacheManager from configuration.

    Call once at startup and hand the result to collaborators; close it on
    shutdown to stop the background sweep.
    """
    if config is None:
        from archi_cache.config import create_config

        config = create_config()
    volatile = MemoryCacheStore(max_size=_as_int("cache.memory_max_size", config["cache.memory_max_size"]))
    return CacheManager(
        volatile=volatile,
        durable=create_durable_store(config),
        router=create_router(config),
        sweep_interval_seconds=_as_float("cache.sweep_interval_seconds", config["cache.sweep_interval_seconds"]),
        start_sweeper=start_sweeper,
    )
