"""In-memory TTL caches for upstream lookups.

Two call patterns are served: a keyed TTL map (OMDb metadata, parsed
seasons) and a single-slot TTL cache (the home-page "latest" snapshot).
Each cache owns its map and reads time through an injected clock, so an
instance per test gives isolation and a fake clock gives virtual time.

Entries are independent and cheap to regenerate. Concurrent misses on the
same key may both hit the network; the last write wins.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, TypeVar

import structlog

from binger.models.cache import CacheEntry

if TYPE_CHECKING:
    from binger.models.media import LatestContent

log = structlog.get_logger()

Clock = Callable[[], float]

METADATA_TTL_SECONDS = 5 * 60
SEASON_TTL_SECONDS = 5 * 60
LATEST_TTL_SECONDS = 24 * 60 * 60

LATEST_KEY = "latest_home"

T = TypeVar("T")


def metadata_cache_key(query: str, search: bool, media_type: str) -> str:
    """``"tt123:false:movie"``. Identical triples always share a slot."""
    return f"{query}:{'true' if search else 'false'}:{media_type}"


def season_cache_key(series_id: str, season: int) -> str:
    return f"{series_id}:{season}"


class TTLCache(Generic[T]):
    """Keyed cache whose entries expire ``ttl_seconds`` after being written.

    Expired entries are dropped when read, and swept from the whole map at
    most once per TTL window on write, so keys that are never read again
    do not accumulate.
    """

    def __init__(self, ttl_seconds: float, *, clock: Clock = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._next_sweep = 0.0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> T | None:
        """Return the live value for ``key``. Expired entries are dropped on read."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        self._entries[key] = CacheEntry(value=value, expires_at=now + self._ttl)

    def _sweep(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if not entry.is_fresh(now)]
        for key in expired:
            del self._entries[key]
        self._next_sweep = now + self._ttl
        if expired:
            log.debug("cache_expired_swept", count=len(expired), remaining=len(self._entries))

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class LatestContentCache:
    """Single-slot cache for the home-page latest movies/series snapshot."""

    def __init__(
        self, ttl_seconds: float = LATEST_TTL_SECONDS, *, clock: Clock = time.monotonic
    ) -> None:
        self._cache: TTLCache[LatestContent] = TTLCache(ttl_seconds, clock=clock)

    def get(self) -> LatestContent | None:
        return self._cache.get(LATEST_KEY)

    def set(self, snapshot: LatestContent) -> None:
        self._cache.set(LATEST_KEY, snapshot)

    def invalidate(self) -> None:
        """Drop the snapshot before its TTL so the next read refetches."""
        self._cache.delete(LATEST_KEY)
        log.info("latest_cache_invalidated")
