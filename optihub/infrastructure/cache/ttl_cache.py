"""
TTL cache for analysis results.

Each entry carries an absolute expiry instant computed from the wall clock at
``set`` time. Expiry is evaluated lazily on read; there is no background
timer and no eviction policy besides TTL. Wall-clock time is used on purpose
(this is an interactive tool cache); clock skew is not guarded against.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from optihub.core.errors import CacheMissError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the instant it stops being valid."""

    key: str
    value: Any
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class TTLCache:
    """Key to value store with per-entry time-to-live.

    Usage:
        cache = TTLCache()
        cache.set("AllTextureInfos", infos, timedelta(minutes=5))
        if cache.is_valid("AllTextureInfos"):
            infos = cache.get("AllTextureInfos")
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """Initialize the cache.

        Args:
            clock: Source of the current time; defaults to ``datetime.now``
        """
        self._clock: Clock = clock or datetime.now
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def now(self) -> datetime:
        return self._clock()

    def _valid_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry

    def is_valid(self, key: str) -> bool:
        """Check whether ``key`` exists and has not expired."""
        with self._lock:
            return self._valid_entry(key) is not None

    def get(self, key: str) -> Any:
        """Return the value for a valid key.

        Raises:
            CacheMissError: If the key is absent or expired. Callers must
                check ``is_valid`` first or use ``try_get``.
        """
        with self._lock:
            entry = self._valid_entry(key)
        if entry is None:
            raise CacheMissError(key)
        return entry.value

    def try_get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key`` if valid, else ``default``."""
        with self._lock:
            entry = self._valid_entry(key)
        return default if entry is None else entry.value

    def set(self, key: str, value: Any, ttl: timedelta | float) -> None:
        """Store ``value`` under ``key``, overwriting any previous entry.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live, as a timedelta or seconds, relative to now
        """
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)
        logger.debug(f"Cached '{key}' for {ttl.total_seconds():.0f}s")

    def remove(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def clear_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Dropped {len(expired)} expired cache entries")
        return len(expired)

    def stats(self) -> tuple[int, list[str]]:
        """Return (entry count, keys), expired entries included."""
        with self._lock:
            return len(self._entries), list(self._entries)

    def detailed_stats(self) -> dict[str, datetime]:
        """Return key to expiry instant for every stored entry."""
        with self._lock:
            return {k: e.expires_at for k, e in self._entries.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.is_valid(key)
