from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from archi_cache.cache.factory import create_cache_manager
from archi_cache.config import create_config

if TYPE_CHECKING:
    from collections.abc import Iterator

    from archi_cache.cache.manager import CacheManager


@contextmanager
def build_cache_context(config_path: str, db_path: str | None = None) -> Iterator[CacheManager]:
    """Yield a CacheManager without a background sweep, closing it afterwards."""
    config = create_config(yaml_path=config_path, db_path=db_path)
    manager = create_cache_manager(config, start_sweeper=False)
    try:
        yield manager
    finally:
        manager.close()
