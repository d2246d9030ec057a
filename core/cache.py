"""In-memory expiring key/value store.

Entries live in a dict keyed by cache key; a min-heap of (expires_at, key)
facts drives reclamation. Every public call takes the lock, pops the heap
nodes whose deadline has passed and checks each against the dict before
dropping anything. Overwritten or removed keys leave their old nodes behind;
those are recognised as stale when popped and discarded.

Expiry is only observed inside a call. There is no sweeper thread.

This store is process-local. It is safe for concurrent access from threads
inside the same Python process, but it is not shared across workers/instances.
"""

from __future__ import annotations

import heapq
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from core.errors import InvalidArgumentError

logger = logging.getLogger("expiring-kv")

NOT_FOUND_TTL = -1


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


@dataclass(frozen=True)
class Entry:
    value: str
    expires_at: int

    def is_expired_at(self, now: int) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True, order=True)
class ExpiryNode:
    expires_at: int
    key: str


def _validate_key(key: str) -> None:
    if not isinstance(key, str) or not key.strip():
        raise InvalidArgumentError("key must be a non-empty string")


def _validate_put(key: str, value: str, ttl_ms: int) -> None:
    _validate_key(key)
    if value is None:
        raise InvalidArgumentError("value must not be null")
    if isinstance(ttl_ms, bool) or not isinstance(ttl_ms, int):
        raise InvalidArgumentError("ttl_ms must be an integer")
    if ttl_ms < 0:
        raise InvalidArgumentError("ttl_ms must be >= 0")


class ExpiringCache:
    def __init__(self, time_func: Callable[[], int] = monotonic_ms):
        if time_func is None:
            raise InvalidArgumentError("time_func is required")
        self._time_func = time_func
        self._lock = threading.Lock()
        self._store: dict[str, Entry] = {}
        self._heap: list[ExpiryNode] = []

    def _purge_expired(self, now: int) -> int:
        removed = 0
        while self._heap and self._heap[0].expires_at <= now:
            node = heapq.heappop(self._heap)
            entry = self._store.get(node.key)
            if entry is None:
                continue
            if entry.expires_at != node.expires_at:
                continue
            del self._store[node.key]
            removed += 1
        if removed:
            logger.debug("kv_purged", extra={"removed": removed, "scheduled": len(self._heap)})
        return removed

    def _insert(self, key: str, value: str, expires_at: int) -> None:
        self._store[key] = Entry(value, expires_at)
        heapq.heappush(self._heap, ExpiryNode(expires_at, key))

    def put(self, key: str, value: str, ttl_ms: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_ms``; overwrites and resets the TTL."""
        _validate_put(key, value, ttl_ms)
        with self._lock:
            now = self._time_func()
            self._purge_expired(now)
            self._insert(key, value, now + ttl_ms)

    def get(self, key: str) -> Optional[str]:
        """Return the live value, or None when missing or expired."""
        _validate_key(key)
        with self._lock:
            now = self._time_func()
            self._purge_expired(now)

            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired_at(now):
                del self._store[key]
                return None
            return entry.value

    def remove(self, key: str) -> bool:
        _validate_key(key)
        with self._lock:
            self._purge_expired(self._time_func())
            return self._store.pop(key, None) is not None

    def size(self) -> int:
        with self._lock:
            self._purge_expired(self._time_func())
            return len(self._store)

    def get_remaining_ttl(self, key: str) -> int:
        """Milliseconds left for a live key, NOT_FOUND_TTL otherwise."""
        _validate_key(key)
        with self._lock:
            now = self._time_func()
            self._purge_expired(now)

            entry = self._store.get(key)
            if entry is None or entry.is_expired_at(now):
                return NOT_FOUND_TTL
            return entry.expires_at - now

    def put_if_absent(self, key: str, value: str, ttl_ms: int) -> tuple[bool, str]:
        """Insert only when no live entry exists.

        Returns ``(stored, value_in_effect)``: whether this call wrote, and the
        value the key holds right after the call, read under the same lock.
        """
        _validate_put(key, value, ttl_ms)
        with self._lock:
            now = self._time_func()
            self._purge_expired(now)

            entry = self._store.get(key)
            if entry is not None and not entry.is_expired_at(now):
                return False, entry.value
            self._insert(key, value, now + ttl_ms)
            return True, value

    def scheduled_count(self) -> int:
        """Heap nodes still pending, stale ones included. Does not purge."""
        with self._lock:
            return len(self._heap)


cache = ExpiringCache()
