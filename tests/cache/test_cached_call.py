"""Tests for cached_call()."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from archi_cache.cache.manager import CacheManager
from archi_cache.cache.memory_store import MemoryCacheStore
from archi_cache.cache.sqlite_store import SqliteCacheStore
from archi_cache.cache.wrapper import cached_call

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path

    from tests.conftest import FakeClock


@pytest.fixture
def manager(db_path: Path, clock: FakeClock) -> Generator[CacheManager]:
    with CacheManager(
        MemoryCacheStore(clock=clock),
        SqliteCacheStore(db_path, clock=clock),
        start_sweeper=False,
    ) as m:
        yield m


class TestCachedCall:
    def test_cache_miss_delegates_and_stores(self, manager: CacheManager) -> None:
        calls: list[int] = []

        def fetch() -> list[dict[str, object]]:
            calls.append(1)
            return [{"id": 1, "name": "Melnikov House"}]

        result = cached_call(fetch, manager=manager, key="buildings:moscow")

        assert result == [{"id": 1, "name": "Melnikov House"}]
        assert len(calls) == 1
        assert manager.has("buildings:moscow")

    def test_cache_hit_returns_without_delegating(self, manager: CacheManager) -> None:
        calls: list[int] = []

        def fetch() -> list[str]:
            calls.append(1)
            return ["r1"]

        cached_call(fetch, manager=manager, key="routes:popular")
        result = cached_call(fetch, manager=manager, key="routes:popular")

        assert result == ["r1"]
        assert len(calls) == 1

    def test_explicit_ttl(self, manager: CacheManager, clock: FakeClock) -> None:
        calls: list[int] = []

        def fetch() -> int:
            calls.append(1)
            return len(calls)

        assert cached_call(fetch, manager=manager, key="news:1", ttl=100) == 1
        clock.advance(101)
        assert cached_call(fetch, manager=manager, key="news:1", ttl=100) == 2

    def test_none_is_not_cached(self, manager: CacheManager) -> None:
        calls: list[int] = []

        def fetch() -> None:
            calls.append(1)

        cached_call(fetch, manager=manager, key="search:q=tower")
        cached_call(fetch, manager=manager, key="search:q=tower")

        assert len(calls) == 2
        assert not manager.has("search:q=tower")

    def test_fetch_errors_propagate(self, manager: CacheManager) -> None:
        def fetch() -> int:
            raise ConnectionError("backend down")

        with pytest.raises(ConnectionError):
            cached_call(fetch, manager=manager, key="news:1")
        assert not manager.has("news:1")

    def test_unserializable_durable_value_still_returned(self, manager: CacheManager) -> None:
        marker = object()

        result = cached_call(lambda: marker, manager=manager, key="buildings:odd")

        assert result is marker
        assert not manager.has("buildings:odd")
