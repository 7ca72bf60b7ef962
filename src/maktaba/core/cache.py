# ABOUTME: Fixed-capacity cache of recent search results with a time-to-live.
# ABOUTME: Evicts the oldest inserted key when full; expired entries read as misses.

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any

logger = logging.getLogger(__name__)

CACHE_SIZE = 50
CACHE_TTL = 5 * 60.0  # seconds


class SearchCache:
    """Insertion-ordered cache shared by the interactive and worker threads."""

    def __init__(
        self,
        capacity: int = CACHE_SIZE,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: Hashable) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            created, value = entry
            if self._clock() - created >= self._ttl:
                del self._entries[key]
                logger.debug("Search cache expired: %r", key)
                return None
            logger.debug("Search cache hit: %r", key)
            return value

    def put(self, key: Hashable, value: Any) -> None:
        """Store a value. Re-inserting a key makes it the newest entry."""
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._capacity:
                oldest, _ = self._entries.popitem(last=False)
                logger.debug("Search cache evicted: %r", oldest)
            self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[Hashable]:
        """Keys from oldest to newest, including any that have expired."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
