from __future__ import annotations
import logging
from fastapi import APIRouter, Depends
from core.event_log import LogEvent, SessionLogBuffer
from core.sessions import SessionRegistry
from schemas.platform import AppendLogRequest, AppendLogResponse, LogEventOut, SessionLogResponse
from .common import get_session_logs, get_session_registry

router = APIRouter(prefix="/v1/platform")
logger = logging.getLogger("expiring-kv")

@router.post("/{sid}/touch")
async def touch(sid: str, registry: SessionRegistry = Depends(get_session_registry)):
    """Marca a sessão como ativa agora."""
    registry.touch(sid)
    return {"sid": sid, "touched": True}

@router.post("/{sid}/log", response_model=AppendLogResponse)
async def append_log(
    sid: str,
    body: AppendLogRequest,
    registry: SessionRegistry = Depends(get_session_registry),
    logs: SessionLogBuffer = Depends(get_session_logs),
):
    """Registra um evento de demo no buffer circular da sessão."""
    now = registry.touch(sid)
    event = LogEvent(
        ts_ms=now,
        demo=body.demo,
        method=body.method,
        args=body.args or {},
        result=body.result,
    )
    count = logs.append(sid, event)
    return AppendLogResponse(count=count, event=LogEventOut(**event.to_dict()))

@router.get("/{sid}/log", response_model=SessionLogResponse)
async def get_log(
    sid: str,
    registry: SessionRegistry = Depends(get_session_registry),
    logs: SessionLogBuffer = Depends(get_session_logs),
):
    registry.touch(sid)
    events = [LogEventOut(**e.to_dict()) for e in logs.get(sid)]
    return SessionLogResponse(sid=sid, events=events)

@router.get("/sessions")
async def sessions(registry: SessionRegistry = Depends(get_session_registry)):
    """Último acesso (epoch ms) de cada sessão conhecida."""
    return dict(registry.snapshot())

@router.post("/{sid}/clear")
async def clear(
    sid: str,
    registry: SessionRegistry = Depends(get_session_registry),
    logs: SessionLogBuffer = Depends(get_session_logs),
):
    logs.clear(sid)
    registry.remove(sid)
    logger.info("session_cleared", extra={"path": f"/v1/platform/{sid}/clear"})
    return {"sid": sid, "cleared": True}
