"""Key routing between the volatile and durable tiers.

Keys are classified by namespace prefix. The tier comes from the longest
matching prefix in the tier table; the default TTL comes from the longest
matching prefix in the TTL table. Both tables are fixed when the router is
built.

Usage:
    router = StrategyRouter()
    route = router.resolve("buildings:list:page=2")
    route.tier         # Tier.DURABLE
    route.default_ttl  # 1_800_000 (30 minutes)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Mapping

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

V = TypeVar("V")


class Tier(StrEnum):
    VOLATILE = "volatile"
    DURABLE = "durable"


# TTL classes, in milliseconds. Keyed by the name used in configuration.
DEFAULT_TTL_CLASSES: dict[str, int] = {
    "static_assets": 365 * DAY_MS,
    "api_responses": 5 * MINUTE_MS,
    "images": DAY_MS,
    "components": HOUR_MS,
    "user_preferences": DAY_MS,
    "search_results": 10 * MINUTE_MS,
    "buildings": 30 * MINUTE_MS,
    "routes": 30 * MINUTE_MS,
    "news": 15 * MINUTE_MS,
}

# Fallback TTL class for keys that match no prefix.
GENERIC_TTL_CLASS = "api_responses"

# Key prefix -> TTL class.
DEFAULT_TTL_PREFIXES: dict[str, str] = {
    "static": "static_assets",
    "images": "images",
    "components": "components",
    "buildings": "buildings",
    "routes": "routes",
    "news": "news",
    "search": "search_results",
    "user": "user_preferences",
}

DEFAULT_TIER_PREFIXES: dict[str, Tier] = {
    # Small, frequently touched UI state.
    "user_preferences": Tier.VOLATILE,
    "search_history": Tier.VOLATILE,
    "filter_state": Tier.VOLATILE,
    # Catalog and listing data worth keeping across restarts.
    "buildings": Tier.DURABLE,
    "routes": Tier.DURABLE,
    "news": Tier.DURABLE,
    "user_profile": Tier.DURABLE,
}


@dataclass(frozen=True, slots=True)
class Route:
    tier: Tier
    default_ttl: int


def _longest_prefix(key: str, table: Mapping[str, V]) -> V | None:
    best: str | None = None
    for prefix in table:
        if key.startswith(prefix) and (best is None or len(prefix) > len(best)):
            best = prefix
    return None if best is None else table[best]


class StrategyRouter:
    """Maps a cache key to its tier and default TTL.

    Args:
        tier_prefixes: Key prefix to tier. Unmatched keys go to the volatile tier.
        ttl_prefixes: Key prefix to TTL class name.
        ttl_classes: TTL class name to lifetime in milliseconds. Must contain
            ``GENERIC_TTL_CLASS`` and every class named in ``ttl_prefixes``.
    """

    def __init__(
        self,
        tier_prefixes: Mapping[str, Tier] | None = None,
        ttl_prefixes: Mapping[str, str] | None = None,
        ttl_classes: Mapping[str, int] | None = None,
    ) -> None:
        classes = dict(DEFAULT_TTL_CLASSES if ttl_classes is None else ttl_classes)
        prefixes = dict(DEFAULT_TTL_PREFIXES if ttl_prefixes is None else ttl_prefixes)
        if GENERIC_TTL_CLASS not in classes:
            raise ValueError(f"TTL classes must define {GENERIC_TTL_CLASS!r}")
        unknown = sorted(set(prefixes.values()) - set(classes))
        if unknown:
            raise ValueError(f"Unknown TTL classes: {', '.join(unknown)}")
        negative = sorted(name for name, ttl in classes.items() if ttl < 0)
        if negative:
            raise ValueError(f"TTL must not be negative: {', '.join(negative)}")

        self._tiers: Mapping[str, Tier] = MappingProxyType(
            dict(DEFAULT_TIER_PREFIXES if tier_prefixes is None else tier_prefixes)
        )
        self._ttls: Mapping[str, int] = MappingProxyType({prefix: classes[name] for prefix, name in prefixes.items()})
        self._generic_ttl = classes[GENERIC_TTL_CLASS]

    @property
    def generic_ttl(self) -> int:
        return self._generic_ttl

    def resolve(self, key: str) -> Route:
        tier = _longest_prefix(key, self._tiers)
        ttl = _longest_prefix(key, self._ttls)
        return Route(
            tier=Tier.VOLATILE if tier is None else tier,
            default_ttl=self._generic_ttl if ttl is None else ttl,
        )
