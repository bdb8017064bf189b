"""Persistent TTL cache for remotely fetched detail documents.

Entries map a numeric identifier to the raw fetched payload plus the time it
was fetched. Freshness is decided per call: the caller passes the TTL it is
willing to accept, so one stored entry can serve a "fresh within a day"
caller and a "fresh within an hour" caller alike.

A failed fetch never falls back to a stale entry and never touches the
stored one. Concurrent misses for the same key are not deduplicated: each
caller fetches, and writes are serialized under one store-wide lock with the
last writer winning.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..envelope import DataSource
from ..errors import FetchFailure, InvalidArgument, StorageFault
from ..shared.logging import get_logger

logger = get_logger("cache.detail")

Fetcher = Callable[[int], bytes]

CACHE_SCHEMA = """
CREATE TABLE IF NOT EXISTS detail_cache(
    key INTEGER PRIMARY KEY,
    payload BLOB NOT NULL,
    fetched_at REAL NOT NULL,
    source TEXT NOT NULL
);
"""


@dataclass(frozen=True, slots=True)
class CachedDocument:
    key: int
    payload: bytes
    fetched_at: float
    source: DataSource

    def age(self, now: float) -> float:
        return now - self.fetched_at


class DetailCache:
    """SQLite-backed detail cache with caller-supplied TTLs.

    Lifecycle is explicit: ``open()`` creates the backing store and
    ``close()`` releases it; the class also works as a context manager.
    """

    def __init__(
        self,
        path: Path,
        fetcher: Fetcher,
        *,
        source: DataSource = DataSource.REMOTE_STORE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = Path(path)
        self._fetcher = fetcher
        self._source = source
        self._clock = clock
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> "DetailCache":
        if self._conn is not None:
            return self
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self._path), check_same_thread=False)
        except (OSError, sqlite3.Error) as exc:
            raise StorageFault(f"cannot open detail cache at {self._path}: {exc}") from exc
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(CACHE_SCHEMA)
        except sqlite3.Error as exc:
            conn.close()
            raise StorageFault(f"detail cache at {self._path} is unusable: {exc}") from exc
        self._conn = conn
        logger.debug("detail_cache_opened", path=str(self._path))
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "DetailCache":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageFault("detail cache is not open")
        return self._conn

    def lookup(self, key: int) -> Optional[CachedDocument]:
        """Return the stored entry for ``key`` regardless of its age."""

        with self._lock:
            try:
                row = self._connection().execute(
                    "SELECT payload, fetched_at, source FROM detail_cache WHERE key = ?",
                    (key,),
                ).fetchone()
            except sqlite3.Error as exc:
                raise StorageFault(f"detail cache read failed: {exc}") from exc
        if row is None:
            return None
        return CachedDocument(key=key, payload=bytes(row[0]), fetched_at=row[1], source=DataSource(row[2]))

    def store(self, document: CachedDocument) -> None:
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO detail_cache(key, payload, fetched_at, source)
                        VALUES (?, ?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET
                            payload = excluded.payload,
                            fetched_at = excluded.fetched_at,
                            source = excluded.source
                        """,
                        (document.key, document.payload, document.fetched_at, document.source.value),
                    )
            except sqlite3.Error as exc:
                raise StorageFault(f"detail cache write failed: {exc}") from exc

    def get(self, key: int, ttl_seconds: float, force_refresh: bool = False) -> Tuple[CachedDocument, bool]:
        """Return ``(document, cached)`` for ``key``.

        A stored entry younger than ``ttl_seconds`` is returned as-is with
        ``cached=True``. Otherwise, or when ``force_refresh`` is set, the
        fetcher is called exactly once and its result replaces the entry.
        """

        if ttl_seconds < 0:
            raise InvalidArgument(f"ttl must not be negative, got {ttl_seconds}")

        if not force_refresh:
            existing = self.lookup(key)
            now = self._clock()
            if existing is not None and existing.age(now) < ttl_seconds:
                logger.debug("detail_cache_hit", key=key, age=existing.age(now))
                return existing, True

        logger.debug("detail_cache_fetch", key=key, forced=force_refresh)
        try:
            payload = self._fetcher(key)
        except FetchFailure as exc:
            logger.warning("detail_fetch_failed", key=key, kind=exc.kind, error=exc.message)
            raise

        document = CachedDocument(key=key, payload=payload, fetched_at=self._clock(), source=self._source)
        self.store(document)
        return document, False

    def invalidate(self, key: int) -> bool:
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    deleted = conn.execute("DELETE FROM detail_cache WHERE key = ?", (key,)).rowcount
            except sqlite3.Error as exc:
                raise StorageFault(f"detail cache delete failed: {exc}") from exc
        return deleted > 0

    def purge_older_than(self, seconds: float) -> int:
        """Drop entries fetched more than ``seconds`` ago; returns the count removed."""

        cutoff = self._clock() - seconds
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    deleted = conn.execute("DELETE FROM detail_cache WHERE fetched_at < ?", (cutoff,)).rowcount
            except sqlite3.Error as exc:
                raise StorageFault(f"detail cache purge failed: {exc}") from exc
        logger.info("detail_cache_purged", removed=deleted, cutoff=cutoff)
        return deleted


__all__ = ["CachedDocument", "DetailCache", "Fetcher"]
