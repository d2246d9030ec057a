from __future__ import annotations
import logging
from fastapi import APIRouter, Depends, HTTPException
from core.cache import NOT_FOUND_TTL, ExpiringCache
from schemas.kv import (
    PutIfAbsentResponse,
    PutRequest,
    PutResponse,
    RemainingTTLResponse,
    RemoveResponse,
    SizeResponse,
    ValueResponse,
)
from .common import get_cache

router = APIRouter(prefix="/v1/kv")
logger = logging.getLogger("expiring-kv")

@router.get("", response_model=SizeResponse)
async def kv_size(store: ExpiringCache = Depends(get_cache)):
    """Quantidade de chaves vivas (expiradas nunca entram na contagem)."""
    return SizeResponse(size=store.size())

@router.put("/{key}", response_model=PutResponse)
async def kv_put(key: str, body: PutRequest, store: ExpiringCache = Depends(get_cache)):
    """Grava o valor e reinicia o TTL da chave."""
    store.put(key, body.value, body.ttl_ms)
    return PutResponse(key=key, ttl_ms=body.ttl_ms)

@router.post("/{key}/put-if-absent", response_model=PutIfAbsentResponse)
async def kv_put_if_absent(key: str, body: PutRequest, store: ExpiringCache = Depends(get_cache)):
    """Grava apenas se não houver valor vivo; nunca reinicia o TTL existente."""
    stored, value = store.put_if_absent(key, body.value, body.ttl_ms)
    return PutIfAbsentResponse(key=key, stored=stored, value=value)

@router.get("/{key}", response_model=ValueResponse)
async def kv_get(key: str, store: ExpiringCache = Depends(get_cache)):
    value = store.get(key)
    if value is None:
        raise HTTPException(status_code=404, detail="Chave não encontrada ou expirada.")
    return ValueResponse(key=key, value=value)

@router.delete("/{key}", response_model=RemoveResponse)
async def kv_remove(key: str, store: ExpiringCache = Depends(get_cache)):
    return RemoveResponse(key=key, removed=store.remove(key))

@router.get("/{key}/ttl", response_model=RemainingTTLResponse)
async def kv_remaining_ttl(key: str, store: ExpiringCache = Depends(get_cache)):
    """TTL restante em ms; -1 para chave ausente ou expirada."""
    remaining = store.get_remaining_ttl(key)
    if remaining == NOT_FOUND_TTL:
        logger.debug("kv_ttl_miss", extra={"path": f"/v1/kv/{key}/ttl"})
    return RemainingTTLResponse(key=key, remaining_ttl_ms=remaining)
