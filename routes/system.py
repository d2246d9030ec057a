from __future__ import annotations
import os
from fastapi import APIRouter, Depends
from core.cache import ExpiringCache
from .common import get_cache

router = APIRouter()

SERVICE_NAME = "expiring-kv-api"
SERVICE_VERSION = "0.1.0"

@router.get("/")
async def root(store: ExpiringCache = Depends(get_cache)):
    """Endpoint raiz para verificações de uptime."""
    return {
        "ok": True,
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "env": {"log_level": os.getenv("LOG_LEVEL", "INFO")},
        "kv": {"live_keys": store.size(), "scheduled_expirations": store.scheduled_count()},
    }

@router.get("/health")
async def health_check():
    """Endpoint simples de health check."""
    return {"ok": True}
