from __future__ import annotations
from core.cache import ExpiringCache, cache
from core.event_log import SessionLogBuffer, session_logs
from core.scheduler import JobScheduler, scheduler
from core.sessions import SessionRegistry, session_registry

def get_cache() -> ExpiringCache:
    """Dependência: store de chaves com expiração do processo."""
    return cache

def get_scheduler() -> JobScheduler:
    return scheduler

def get_session_registry() -> SessionRegistry:
    return session_registry

def get_session_logs() -> SessionLogBuffer:
    return session_logs
