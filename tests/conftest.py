"""Shared pytest fixtures for test modules."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path

    from archi_cache.cache.sqlite_store import SqliteCacheStore


class FakeClock:
    """Manually advanced millisecond clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "cache.db"


@pytest.fixture
def durable_store(db_path: Path, clock: FakeClock) -> Generator[SqliteCacheStore]:
    from archi_cache.cache.sqlite_store import SqliteCacheStore

    store = SqliteCacheStore(db_path, clock=clock)
    yield store
    store.close()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all ARCHI__ env vars so tests are isolated from the shell."""
    for key in list(os.environ):
        if key.startswith("ARCHI__"):
            monkeypatch.delenv(key)
