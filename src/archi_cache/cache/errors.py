"""Error kinds produced by the durable cache tier.

None of these ever leave the store: they are carried inside ``Err`` values
and logged at the store boundary.
"""

from __future__ import annotations


class CacheStoreError(Exception):
    """Base class for failures of the persisted cache medium."""

    def __init__(self, key: str, cause: BaseException | str) -> None:
        super().__init__(f"{key}: {cause}")
        self.key = key
        self.cause = cause


class WriteError(CacheStoreError):
    """The medium refused a write (quota, disk full, read-only file)."""


class ReadError(CacheStoreError):
    """The medium could not be queried."""


class CorruptRecordError(CacheStoreError):
    """A persisted record could not be parsed back into an entry.

    ``record`` is the raw column value that failed to parse, so the caller can delete
    exactly that row and not a newer value written in the meantime.
    """

    def __init__(self, key: str, cause: BaseException | str, record: object) -> None:
        super().__init__(key, cause)
        self.record = record


class SerializationError(CacheStoreError):
    """A value could not be encoded into the textual record format."""
