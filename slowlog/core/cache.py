"""
In-memory TTL cache for rendered slow query pages.

Bounded twice: entries expire after ``ttl_seconds`` and at most
``max_entries`` are kept, oldest evicted first. Expired entries are purged on
every write, so keys nobody reads again do not linger.
"""

import time
from collections import OrderedDict
from threading import Lock
from typing import Hashable, Optional


class ResponseCache:
    """Rendered response bodies with an expiry, in insertion order."""

    def __init__(self, ttl_seconds: int, max_entries: int = 256, clock=time.monotonic):
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[Hashable, tuple[bytes, float]]" = OrderedDict()
        self._lock = Lock()

    @property
    def enabled(self) -> bool:
        return self._ttl_seconds > 0 and self._max_entries > 0

    def get(self, key: Hashable) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            body, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None

            return body

    def set(self, key: Hashable, body: bytes) -> None:
        if not self.enabled:
            return
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries.pop(key, None)
            self._entries[key] = (body, now + self._ttl_seconds)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        # Every entry shares one TTL, so insertion order is expiry order.
        while self._entries:
            key, (_, expires_at) = next(iter(self._entries.items()))
            if now < expires_at:
                break
            del self._entries[key]
