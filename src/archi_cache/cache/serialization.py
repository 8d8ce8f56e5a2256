"""Serialization of cache entries into the durable tier's textual record format.

Each persisted row holds one JSON object:

    {"key": "buildings:list", "data": [...], "created_at": 1700000000000.0, "ttl": 1800000}

Usage:
    serializer = JsonEntrySerializer()
    record = serializer.serialize(entry)
    entry = serializer.deserialize(record)
"""

from __future__ import annotations

import json
from typing import Protocol

from archi_cache.cache.entry import CacheEntry

_RECORD_FIELDS = ("key", "data", "created_at", "ttl")


class EntrySerializer(Protocol):
    """Protocol for converting entries to and from persisted text."""

    def serialize(self, entry: CacheEntry) -> str:
        """Convert an entry to a string for storage."""
        ...

    def deserialize(self, record: str) -> CacheEntry:
        """Convert a stored string back into an entry.

        Raises ValueError (or a subclass) when the record is malformed.
        """
        ...


class JsonEntrySerializer:
    """Stores entries as compact JSON objects.

    The payload must be JSON-serializable; anything else raises TypeError or
    ValueError from ``serialize``.
    """

    def serialize(self, entry: CacheEntry) -> str:
        return json.dumps(
            {
                "key": entry.key,
                "data": entry.data,
                "created_at": entry.created_at,
                "ttl": entry.ttl,
            },
            separators=(",", ":"),
            allow_nan=False,
        )

    def deserialize(self, record: str) -> CacheEntry:
        raw = json.loads(record)
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")
        missing = [name for name in _RECORD_FIELDS if name not in raw]
        if missing:
            raise ValueError(f"Record is missing fields: {', '.join(missing)}")
        key, created_at, ttl = raw["key"], raw["created_at"], raw["ttl"]
        if not isinstance(key, str):
            raise ValueError("Record key must be a string")
        if isinstance(created_at, bool) or not isinstance(created_at, int | float):
            raise ValueError("Record created_at must be a number")
        if isinstance(ttl, bool) or not isinstance(ttl, int | float):
            raise ValueError("Record ttl must be a number")
        return CacheEntry(key=key, data=raw["data"], created_at=float(created_at), ttl=float(ttl))
