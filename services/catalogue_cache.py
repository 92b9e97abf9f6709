"""In-process, time-boxed cache for the filtered book catalogue.

Only the filtered view is cached. Two requests that both find the cache
stale will both refresh it and the last write wins; both writes hold the
same upstream data, so the race is tolerated rather than coalesced.
"""

import threading
import time

import config


class CatalogueCache:
    def __init__(self, ttl_seconds=None, clock=time.monotonic):
        self.ttl_seconds = config.BOOKS_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries = None
        self._captured_at = None

    def _is_fresh_locked(self):
        if not self._entries or self._captured_at is None:
            return False
        return (self._clock() - self._captured_at) < self.ttl_seconds

    def is_fresh(self):
        with self._lock:
            return self._is_fresh_locked()

    def get(self):
        """Return the cached entries while fresh, otherwise ``None``."""
        with self._lock:
            if not self._is_fresh_locked():
                return None
            return list(self._entries)

    def store(self, entries):
        snapshot = tuple(entries)
        with self._lock:
            self._entries = snapshot
            self._captured_at = self._clock()

    def clear(self):
        with self._lock:
            self._entries = None
            self._captured_at = None

    @property
    def captured_at(self):
        return self._captured_at


books_cache = CatalogueCache()
