"""Bounded per-session event log.

Each session keeps at most ``max_events_per_session`` events; appending past
the cap drops the oldest one.
"""

from __future__ import annotations

import os
import threading
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Deque, Dict, List

DEFAULT_MAX_EVENTS_PER_SESSION = 300


@dataclass(frozen=True)
class LogEvent:
    ts_ms: int
    demo: str
    method: str
    args: Dict[str, Any] = field(default_factory=dict)
    result: Any = None

    def __post_init__(self) -> None:
        # own a copy so the caller's dict can't rewrite a stored event
        object.__setattr__(self, "args", dict(self.args))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SessionLogBuffer:
    def __init__(self, max_events_per_session: int = DEFAULT_MAX_EVENTS_PER_SESSION):
        if max_events_per_session <= 0:
            raise ValueError("max_events_per_session must be > 0")
        self.max_events_per_session = max_events_per_session
        self._lock = threading.Lock()
        self._logs: Dict[str, Deque[LogEvent]] = {}

    def append(self, session_id: str, event: LogEvent) -> int:
        """Append ``event`` and return the session's event count afterwards."""
        with self._lock:
            queue = self._logs.get(session_id)
            if queue is None:
                queue = deque(maxlen=self.max_events_per_session)
                self._logs[session_id] = queue
            queue.append(event)
            return len(queue)

    def get(self, session_id: str) -> List[LogEvent]:
        with self._lock:
            queue = self._logs.get(session_id)
            return list(queue) if queue else []

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._logs.pop(session_id, None)

    def count(self, session_id: str) -> int:
        with self._lock:
            queue = self._logs.get(session_id)
            return len(queue) if queue else 0


session_logs = SessionLogBuffer(
    int(os.getenv("SESSION_LOG_MAX_EVENTS", str(DEFAULT_MAX_EVENTS_PER_SESSION)))
)
