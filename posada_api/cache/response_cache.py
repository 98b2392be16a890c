"""
TTL cache in front of upstream calls, persisted through a JSON store.
"""

import logging
import time
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from ..persistence import JsonStore
from ..upstream import UpstreamError
from .models import CacheEntry, CacheResult, CacheStatus

logger = logging.getLogger(__name__)


class ResponseCache:
    """Check freshness, fetch when stale, persist, and fall back to stale data."""

    def __init__(self, store: JsonStore, clock=time.time):
        self._store = store
        self._clock = clock
        self._stats = {'fetches': 0, 'hits': 0, 'stale_served': 0}

    def now(self) -> int:
        return int(self._clock())

    def read(self, key: str) -> Optional[CacheEntry]:
        """Read the cached entry for key, if any."""
        raw = self._store.load(key)
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed cache entry {key}: {e}")
            return None

    def is_fresh(self, entry: Optional[CacheEntry], ttl: int) -> bool:
        return entry is not None and self.now() - entry.ts < ttl

    def write(self, key: str, data: Any) -> bool:
        """Store data under key stamped with the current time."""
        entry = CacheEntry(ts=self.now(), data=data)
        return self._store.save(key, entry.model_dump(mode='json'))

    def cached_keys(self) -> List[str]:
        """Keys holding cached upstream responses (history and ledger excluded)."""
        return [k for k in self._store.blobs.keys() if k.endswith('_cache') or k.startswith('ohlcv_')]

    def clear(self, key: Optional[str] = None) -> List[str]:
        """
        Delete one cached response, or every cached response when key is None.

        Only response keys are cleared; price history and the trade ledger
        share the store and are left alone.
        """
        cached = self.cached_keys()
        if key is None:
            keys = cached
        elif key in cached:
            keys = [key]
        else:
            logger.warning(f"Not a cached response, refusing to clear: {key}")
            keys = []
        return [k for k in keys if self._store.delete(k)]

    def get_or_fetch(self, key: str, ttl: int, fetch: Callable[[], Any]) -> CacheResult:
        """
        Serve key from cache while fresh, otherwise refresh it through fetch.

        Refreshes of one key are serialized: a caller that waited on another
        refresh re-checks freshness and reuses that result. A fetch that
        returns None or raises UpstreamError is treated as an upstream outage
        and the last cached value, if any, is served as stale.

        Args:
            key: Cache key
            ttl: Freshness window in seconds
            fetch: Callable producing fresh data, or None when unavailable

        Returns:
            CacheResult with data and how it was obtained
        """
        entry = self.read(key)
        if self.is_fresh(entry, ttl):
            self._stats['hits'] += 1
            logger.debug(f"Cache hit for {key}")
            return CacheResult(data=entry.data, status=CacheStatus.FRESH, cached_at=entry.ts)

        with self._store.lock(key):
            entry = self.read(key)
            if self.is_fresh(entry, ttl):
                self._stats['hits'] += 1
                logger.debug(f"Cache for {key} refreshed by a concurrent request")
                return CacheResult(data=entry.data, status=CacheStatus.FRESH, cached_at=entry.ts)

            self._stats['fetches'] += 1
            try:
                data = fetch()
            except UpstreamError as e:
                logger.warning(f"Upstream refresh of {key} failed: {e}")
                data = None

            if data is not None:
                if not self.write(key, data):
                    logger.error(f"Serving uncached data for {key}")
                return CacheResult(data=data, status=CacheStatus.REFRESHED, cached_at=self.now())

        if entry is not None:
            self._stats['stale_served'] += 1
            logger.warning(f"Serving stale {key} from {self.now() - entry.ts}s ago")
            return CacheResult(data=entry.data, status=CacheStatus.STALE, cached_at=entry.ts)

        return CacheResult(data=None, status=CacheStatus.MISS)

    def get_stats(self) -> dict:
        return dict(self._stats)
