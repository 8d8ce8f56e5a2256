from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from queue import Empty, Full, Queue
from typing import TYPE_CHECKING

from archi_cache.cache.entry import CacheEntry, now_ms
from archi_cache.cache.errors import (
    CacheStoreError,
    CorruptRecordError,
    ReadError,
    SerializationError,
    WriteError,
)
from archi_cache.cache.serialization import JsonEntrySerializer
from archi_cache.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from archi_cache.cache.serialization import EntrySerializer
    from archi_cache.result import Result

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "archi_routes_"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024

# Failures of the medium itself: SQLite errors, OSError when the database
# directory cannot be created, and UnicodeError for keys or values the driver
# cannot encode (lone surrogates).
_MEDIUM_ERRORS = (sqlite3.Error, OSError, UnicodeError)


class SqliteConnectionPool:
    """Thread-safe connection pool for SQLite."""

    def __init__(self, db_path: Path, max_connections: int = 5) -> None:
        self._db_path = db_path
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=max_connections)
        self._schema_lock = threading.Lock()
        self._schema_initialized = False

    def _ensure_initialized(self, conn: sqlite3.Connection) -> None:
        if self._schema_initialized:
            return
        with self._schema_lock:
            if self._schema_initialized:
                return
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                "CREATE TABLE IF NOT EXISTS cache_entries ("
                "  key TEXT PRIMARY KEY,"
                "  record TEXT NOT NULL,"
                "  created_at REAL NOT NULL,"
                "  ttl REAL NOT NULL"
                ")"
            )
            conn.commit()
            self._schema_initialized = True

    def _create_connection(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA busy_timeout=5000")
        try:
            self._ensure_initialized(conn)
        except BaseException:
            conn.close()
            raise
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Acquire a connection from the pool, returning it when done."""
        try:
            conn = self._pool.get_nowait()
        except Empty:
            conn = self._create_connection()

        try:
            yield conn
        finally:
            try:
                self._pool.put_nowait(conn)
            except Full:
                conn.close()

    def close(self) -> None:
        """Close every idle pooled connection."""
        while True:
            try:
                conn = self._pool.get_nowait()
            except Empty:
                return
            conn.close()


class SqliteCacheStore:
    """Durable cache tier persisted to a local SQLite file.

    Every entry is serialized to a JSON record before it is written and parsed
    back before its liveness is checked. Keys are stored under ``prefix`` so
    several stores can share one database; each store only sees its own rows.

    The store is best-effort. Internal primitives return ``Result`` values and
    the public methods turn every ``Err`` into a logged warning plus a miss
    (reads) or a no-op (writes). No storage exception reaches the caller.

    ``max_bytes`` is reported for diagnostics. It is only enforced, by evicting
    the oldest-created rows after a write, when ``enforce_max_bytes`` is set.
    """

    def __init__(
        self,
        db_path: Path,
        *,
        prefix: str = DEFAULT_PREFIX,
        max_bytes: int = DEFAULT_MAX_BYTES,
        enforce_max_bytes: bool = False,
        clock: Callable[[], float] = now_ms,
        serializer: EntrySerializer | None = None,
    ) -> None:
        if max_bytes < 1:
            raise ValueError(f"max_bytes must be at least 1, got {max_bytes}")
        self._db_path = db_path
        self._prefix = prefix
        self._max_bytes = max_bytes
        self._enforce_max_bytes = enforce_max_bytes
        self._clock = clock
        self._serializer = serializer or JsonEntrySerializer()
        self._pool = SqliteConnectionPool(db_path)

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    @property
    def db_path(self) -> Path:
        return self._db_path

    def set(self, key: str, data: object, ttl: float) -> None:
        entry = CacheEntry(key=key, data=data, created_at=self._clock(), ttl=ttl)
        result = self._write(entry)
        if result.is_err():
            logger.warning("Durable cache write skipped: %s", result.unwrap_err())
            return
        if self._enforce_max_bytes:
            self._enforce_budget()

    def get(self, key: str) -> object | None:
        entry = self._live_entry(key)
        return None if entry is None else entry.data

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        result = self._remove(key)
        if result.is_err():
            logger.warning("Durable cache delete failed: %s", result.unwrap_err())
            return False
        return result.unwrap()

    def clear(self) -> None:
        try:
            with self._pool.connection() as conn, conn:
                conn.execute(
                    "DELETE FROM cache_entries WHERE substr(key, 1, ?) = ?",
                    (len(self._prefix), self._prefix),
                )
        except _MEDIUM_ERRORS as e:
            logger.warning("Durable cache clear failed: %s", e)

    def cleanup(self) -> int:
        """Delete every expired row under this store's prefix."""
        try:
            with self._pool.connection() as conn, conn:
                cursor = conn.execute(
                    "DELETE FROM cache_entries WHERE substr(key, 1, ?) = ? AND ? - created_at > ttl",
                    (len(self._prefix), self._prefix, self._clock()),
                )
                removed = cursor.rowcount
        except _MEDIUM_ERRORS as e:
            logger.warning("Durable cache sweep failed: %s", e)
            return 0
        if removed:
            logger.debug("Swept %d expired entries from %s", removed, self._db_path)
        return removed

    def size(self) -> int:
        """Total serialized size in bytes of the records under this prefix."""
        try:
            with self._pool.connection() as conn:
                row = conn.execute(
                    "SELECT COALESCE(SUM(LENGTH(CAST(record AS BLOB))), 0) FROM cache_entries"
                    " WHERE substr(key, 1, ?) = ?",
                    (len(self._prefix), self._prefix),
                ).fetchone()
        except _MEDIUM_ERRORS as e:
            logger.warning("Durable cache size estimate failed: %s", e)
            return 0
        return int(row[0])

    def count(self) -> int:
        try:
            with self._pool.connection() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) FROM cache_entries WHERE substr(key, 1, ?) = ?",
                    (len(self._prefix), self._prefix),
                ).fetchone()
        except _MEDIUM_ERRORS as e:
            logger.warning("Durable cache count failed: %s", e)
            return 0
        return int(row[0])

    def close(self) -> None:
        self._pool.close()

    def _storage_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _live_entry(self, key: str) -> CacheEntry | None:
        result = self._read(key)
        if result.is_err():
            error = result.unwrap_err()
            logger.warning("Durable cache read treated as miss: %s", error)
            if isinstance(error, CorruptRecordError):
                self._discard(key, error.record)
            return None
        entry = result.unwrap()
        if entry is None:
            return None
        if not entry.is_live(self._clock()):
            self._expire(entry)
            return None
        return entry

    def _write(self, entry: CacheEntry) -> Result[None, CacheStoreError]:
        try:
            record = self._serializer.serialize(entry)
        except (TypeError, ValueError, RecursionError) as e:
            return Err(SerializationError(entry.key, e))
        try:
            with self._pool.connection() as conn, conn:
                conn.execute(
                    "INSERT OR REPLACE INTO cache_entries (key, record, created_at, ttl) VALUES (?, ?, ?, ?)",
                    (self._storage_key(entry.key), record, entry.created_at, entry.ttl),
                )
        except _MEDIUM_ERRORS as e:
            return Err(WriteError(entry.key, e))
        return Ok(None)

    def _read(self, key: str) -> Result[CacheEntry | None, CacheStoreError]:
        try:
            with self._pool.connection() as conn:
                row = conn.execute(
                    "SELECT record FROM cache_entries WHERE key = ?",
                    (self._storage_key(key),),
                ).fetchone()
        except _MEDIUM_ERRORS as e:
            return Err(ReadError(key, e))
        if row is None:
            return Ok(None)
        record = row[0]
        try:
            return Ok(self._serializer.deserialize(record))
        except (TypeError, ValueError, RecursionError) as e:
            return Err(CorruptRecordError(key, e, record=record))

    def _remove(self, key: str) -> Result[bool, CacheStoreError]:
        try:
            with self._pool.connection() as conn, conn:
                cursor = conn.execute(
                    "DELETE FROM cache_entries WHERE key = ?",
                    (self._storage_key(key),),
                )
        except _MEDIUM_ERRORS as e:
            return Err(WriteError(key, e))
        return Ok(cursor.rowcount > 0)

    def _expire(self, entry: CacheEntry) -> None:
        # Only the row that was read; a concurrent overwrite carries a new created_at.
        try:
            with self._pool.connection() as conn, conn:
                conn.execute(
                    "DELETE FROM cache_entries WHERE key = ? AND created_at = ?",
                    (self._storage_key(entry.key), entry.created_at),
                )
        except _MEDIUM_ERRORS as e:
            logger.warning("Failed to drop expired durable entry %s: %s", entry.key, e)

    def _discard(self, key: str, record: object) -> None:
        try:
            with self._pool.connection() as conn, conn:
                conn.execute(
                    "DELETE FROM cache_entries WHERE key = ? AND record = ?",
                    (self._storage_key(key), record),
                )
        except _MEDIUM_ERRORS as e:
            logger.warning("Failed to drop corrupt durable entry %s: %s", key, e)

    def _enforce_budget(self) -> None:
        """Evict oldest-created rows until the prefix fits in ``max_bytes``."""
        try:
            with self._pool.connection() as conn, conn:
                rows = conn.execute(
                    "SELECT key, LENGTH(CAST(record AS BLOB)) FROM cache_entries"
                    " WHERE substr(key, 1, ?) = ? ORDER BY created_at ASC",
                    (len(self._prefix), self._prefix),
                ).fetchall()
                total = sum(length for _, length in rows)
                evicted: list[str] = []
                for storage_key, length in rows:
                    if total <= self._max_bytes:
                        break
                    evicted.append(storage_key)
                    total -= length
                conn.executemany("DELETE FROM cache_entries WHERE key = ?", [(k,) for k in evicted])
        except _MEDIUM_ERRORS as e:
            logger.warning("Durable cache byte budget enforcement failed: %s", e)
            return
        if evicted:
            logger.debug("Evicted %d durable entries to stay within %d bytes", len(evicted), self._max_bytes)
