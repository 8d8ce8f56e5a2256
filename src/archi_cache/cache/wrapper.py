"""Get-or-fetch helper on top of the cache manager.

Usage:
    buildings = cached_call(
        lambda: api.list_buildings(city="Moscow"),
        manager=cache,
        key="buildings:moscow",
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar, cast

if TYPE_CHECKING:
    from collections.abc import Callable

    from archi_cache.cache.manager import CacheManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cached_call(
    fetch: Callable[[], T],
    *,
    manager: CacheManager,
    key: str,
    ttl: float | None = None,
) -> T:
    """Return the cached value for ``key``, or fetch, cache and return it.

    ``None`` results are returned but not cached, since ``None`` is also how
    the cache reports a miss. Errors raised by ``fetch`` propagate unchanged.

    Args:
        fetch: Zero-argument callable producing the value on a miss.
        manager: Cache to consult.
        key: Cache key; its prefix decides tier and default TTL.
        ttl: Optional lifetime in milliseconds.
    """
    cached_value = manager.get(key)
    if cached_value is not None:
        logger.debug("Cache hit for %s", key)
        return cast("T", cached_value)

    value = fetch()
    if value is not None:
        manager.set(key, value, ttl)
        logger.debug("Cached %s", key)
    return value
