from __future__ import annotations

from typing import Protocol


class CacheStore(Protocol):
    def set(self, key: str, data: object, ttl: float) -> None: ...

    def get(self, key: str) -> object | None: ...

    def has(self, key: str) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def clear(self) -> None: ...

    def cleanup(self) -> int: ...

    def size(self) -> int: ...
