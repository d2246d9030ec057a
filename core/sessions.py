from __future__ import annotations

import threading
import time
from types import MappingProxyType
from typing import Callable, Mapping


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SessionRegistry:
    """Last-seen timestamps (epoch ms) per demo session."""

    def __init__(self, time_func: Callable[[], int] = wall_clock_ms):
        self._time_func = time_func
        self._lock = threading.Lock()
        self._last_seen: dict[str, int] = {}

    def touch(self, session_id: str) -> int:
        now = self._time_func()
        with self._lock:
            self._last_seen[session_id] = now
        return now

    def remove(self, session_id: str) -> None:
        with self._lock:
            self._last_seen.pop(session_id, None)

    def snapshot(self) -> Mapping[str, int]:
        with self._lock:
            return MappingProxyType(dict(self._last_seen))


session_registry = SessionRegistry()
