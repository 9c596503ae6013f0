"""
Process-local TTL cache.

Implements CachePort. Entries expire a fixed number of seconds after
they were written; there is no size-based eviction and nothing is
shared between processes.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from tradejournal.domain.journal.ports import CachePort

logger = logging.getLogger(__name__)


class TTLCache(CachePort):
    """In-memory cache keyed by string with a single TTL for every entry."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("Cache cleared")
