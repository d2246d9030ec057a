"""Priority job scheduler with lazy cooldowns.

Jobs sit in one of two heaps: ``_ready`` ordered by (priority desc, earliest
last run, job id) and ``_cooling`` ordered by the instant the job becomes
eligible again. Cooling jobs move to ``_ready`` only when an operation
observes that their cooldown has elapsed.

Every config or execution change stamps the job with a fresh sequence number
and pushes a new heap entry; entries whose stamp no longer matches are stale
and skipped when popped, same as the expiring cache does for its heap.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from core.cache import monotonic_ms
from core.errors import InvalidArgumentError

logger = logging.getLogger("expiring-kv")

UNKNOWN_JOB = -1


@dataclass
class Job:
    job_id: str
    priority: int
    cooldown_ms: int
    last_run_at: Optional[int] = None
    stamp: int = 0

    def eligible_at(self) -> int:
        if self.last_run_at is None:
            return 0
        return self.last_run_at + self.cooldown_ms

    def ready_key(self) -> tuple:
        # never-run jobs sort ahead of any job that has run
        ran = 0 if self.last_run_at is None else 1
        return (-self.priority, ran, self.last_run_at or 0, self.job_id, self.stamp)


def _validate_job_id(job_id: str) -> None:
    if not isinstance(job_id, str) or not job_id.strip():
        raise InvalidArgumentError("job_id must be a non-empty string")


def _validate_non_negative(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer")
    if value < 0:
        raise InvalidArgumentError(f"{name} must be >= 0")


class JobScheduler:
    def __init__(self, time_func: Callable[[], int] = monotonic_ms):
        self._time_func = time_func
        self._lock = threading.Lock()
        self._jobs: dict[str, Job] = {}
        self._ready: list[tuple] = []
        self._cooling: list[tuple] = []
        self._stamps = itertools.count(1)

    def _is_current(self, job_id: str, stamp: int) -> bool:
        job = self._jobs.get(job_id)
        return job is not None and job.stamp == stamp

    def _place(self, job: Job, now: int) -> None:
        job.stamp = next(self._stamps)
        if job.eligible_at() <= now:
            heapq.heappush(self._ready, job.ready_key())
        else:
            heapq.heappush(self._cooling, (job.eligible_at(), job.job_id, job.stamp))

    def _promote(self, now: int) -> None:
        while self._cooling and self._cooling[0][0] <= now:
            _, job_id, stamp = heapq.heappop(self._cooling)
            if not self._is_current(job_id, stamp):
                continue
            heapq.heappush(self._ready, self._jobs[job_id].ready_key())

    def _pop_ready(self) -> Optional[tuple]:
        while self._ready:
            entry = heapq.heappop(self._ready)
            job_id, stamp = entry[3], entry[4]
            if self._is_current(job_id, stamp):
                return entry
        return None

    def register_job(self, job_id: str, priority: int, cooldown_ms: int) -> None:
        """Create a job or overwrite its config. Execution history is kept."""
        _validate_job_id(job_id)
        _validate_non_negative("priority", priority)
        _validate_non_negative("cooldown_ms", cooldown_ms)
        with self._lock:
            now = self._time_func()
            job = self._jobs.get(job_id)
            if job is None:
                job = Job(job_id=job_id, priority=priority, cooldown_ms=cooldown_ms)
                self._jobs[job_id] = job
            else:
                job.priority = priority
                job.cooldown_ms = cooldown_ms
            self._place(job, now)

    def execute_next(self) -> Optional[str]:
        with self._lock:
            now = self._time_func()
            self._promote(now)
            entry = self._pop_ready()
            if entry is None:
                return None
            job = self._jobs[entry[3]]
            job.last_run_at = now
            self._place(job, now)
            logger.debug("job_executed", extra={"job_id": job.job_id})
            return job.job_id

    def mark_failed(self, job_id: str) -> bool:
        """Lower the job's priority by one (floor 0). Its cooldown still applies."""
        _validate_job_id(job_id)
        with self._lock:
            now = self._time_func()
            job = self._jobs.get(job_id)
            if job is None:
                return False
            job.priority = max(0, job.priority - 1)
            self._place(job, now)
            return True

    def top_k(self, k: int) -> List[str]:
        _validate_non_negative("k", k)
        with self._lock:
            self._promote(self._time_func())
            taken: list[tuple] = []
            while len(taken) < k:
                entry = self._pop_ready()
                if entry is None:
                    break
                taken.append(entry)
            for entry in taken:
                heapq.heappush(self._ready, entry)
            return [entry[3] for entry in taken]

    def get_remaining_cooldown(self, job_id: str) -> int:
        _validate_job_id(job_id)
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return UNKNOWN_JOB
            return max(0, job.eligible_at() - self._time_func())

    def remove_job(self, job_id: str) -> bool:
        _validate_job_id(job_id)
        with self._lock:
            return self._jobs.pop(job_id, None) is not None


scheduler = JobScheduler()
