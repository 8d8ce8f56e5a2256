from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

import pytest

from archi_cache.cache.memory_store import MemoryCacheStore

if TYPE_CHECKING:
    from tests.conftest import FakeClock


class TestMemoryCacheStore:
    def test_get_returns_none_on_miss(self) -> None:
        store = MemoryCacheStore()
        assert store.get("missing") is None
        assert not store.has("missing")

    def test_set_and_get(self) -> None:
        store = MemoryCacheStore()
        store.set("a", {"x": [1, 2]}, ttl=1000)
        assert store.get("a") == {"x": [1, 2]}
        assert store.has("a")

    def test_ttl_expiry_is_lazy(self, clock: FakeClock) -> None:
        store = MemoryCacheStore(clock=clock)
        store.set("a", 1, ttl=100)
        assert store.get("a") == 1

        clock.advance(100)
        assert store.get("a") == 1

        clock.advance(50)
        assert store.size() == 1
        assert store.get("a") is None
        assert store.size() == 0

    def test_has_removes_expired_entry(self, clock: FakeClock) -> None:
        store = MemoryCacheStore(clock=clock)
        store.set("a", 1, ttl=10)
        clock.advance(11)
        assert not store.has("a")
        assert store.size() == 0

    def test_overwrite_resets_ttl(self, clock: FakeClock) -> None:
        store = MemoryCacheStore(clock=clock)
        store.set("a", 1, ttl=50)
        clock.advance(40)
        store.set("a", 2, ttl=50)
        clock.advance(40)
        assert store.get("a") == 2

    def test_fifo_eviction(self) -> None:
        store = MemoryCacheStore(max_size=2)
        store.set("a", 1, ttl=1000)
        store.set("b", 2, ttl=1000)
        store.set("c", 3, ttl=1000)
        assert not store.has("a")
        assert store.has("b")
        assert store.has("c")
        assert store.size() == 2

    def test_eviction_ignores_access_order(self) -> None:
        store = MemoryCacheStore(max_size=2)
        store.set("a", 1, ttl=1000)
        store.set("b", 2, ttl=1000)
        store.get("a")
        store.set("c", 3, ttl=1000)
        assert not store.has("a")
        assert store.has("b")

    def test_overwrite_at_capacity_does_not_evict(self) -> None:
        store = MemoryCacheStore(max_size=2)
        store.set("a", 1, ttl=1000)
        store.set("b", 2, ttl=1000)
        store.set("a", 10, ttl=1000)
        assert store.get("a") == 10
        assert store.get("b") == 2

    def test_overwrite_keeps_insertion_position(self) -> None:
        store = MemoryCacheStore(max_size=2)
        store.set("a", 1, ttl=1000)
        store.set("b", 2, ttl=1000)
        store.set("a", 10, ttl=1000)
        store.set("c", 3, ttl=1000)
        assert not store.has("a")
        assert store.has("b")

    def test_eviction_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        store = MemoryCacheStore(max_size=1)
        with caplog.at_level(logging.DEBUG, logger="archi_cache.cache.memory_store"):
            store.set("a", 1, ttl=1000)
            store.set("b", 2, ttl=1000)
        records = [r for r in caplog.records if "Evicted" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelno == logging.DEBUG

    def test_delete_reports_presence(self) -> None:
        store = MemoryCacheStore()
        store.set("a", 1, ttl=1000)
        assert store.delete("a") is True
        assert store.delete("a") is False
        assert store.get("a") is None

    def test_clear(self) -> None:
        store = MemoryCacheStore()
        store.set("a", 1, ttl=1000)
        store.set("b", 2, ttl=1000)
        store.clear()
        assert store.size() == 0
        assert not store.has("a")

    def test_cleanup_removes_only_expired(self, clock: FakeClock) -> None:
        store = MemoryCacheStore(clock=clock)
        store.set("short", 1, ttl=10)
        store.set("long", 2, ttl=1000)
        clock.advance(20)
        assert store.cleanup() == 1
        assert store.size() == 1
        assert store.get("long") == 2

    def test_cleanup_is_idempotent(self, clock: FakeClock) -> None:
        store = MemoryCacheStore(clock=clock)
        store.set("short", 1, ttl=10)
        store.set("long", 2, ttl=1000)
        clock.advance(20)
        store.cleanup()
        size_after_first = store.size()
        assert store.cleanup() == 0
        assert store.size() == size_after_first

    def test_size_counts_unswept_expired_entries(self, clock: FakeClock) -> None:
        store = MemoryCacheStore(clock=clock)
        store.set("a", 1, ttl=10)
        clock.advance(100)
        assert store.size() == 1

    def test_rejects_non_positive_max_size(self) -> None:
        with pytest.raises(ValueError, match="max_size"):
            MemoryCacheStore(max_size=0)

    def test_concurrent_writers_respect_max_size(self) -> None:
        store = MemoryCacheStore(max_size=10)

        def writer(prefix: str) -> None:
            for i in range(200):
                store.set(f"{prefix}{i}", i, ttl=1000)

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert store.size() == 10
