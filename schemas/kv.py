from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field

class PutRequest(BaseModel):
    """Corpo para gravar um valor com TTL relativo."""
    value: str = Field(..., description="Valor armazenado sob a chave.")
    ttl_ms: int = Field(..., strict=True, description="TTL em milissegundos (>= 0). 0 expira imediatamente.")

class PutResponse(BaseModel):
    ok: bool = True
    key: str
    ttl_ms: int

class PutIfAbsentResponse(BaseModel):
    ok: bool = True
    key: str
    stored: bool
    value: Optional[str] = None

class ValueResponse(BaseModel):
    key: str
    value: str

class RemoveResponse(BaseModel):
    key: str
    removed: bool

class RemainingTTLResponse(BaseModel):
    key: str
    remaining_ttl_ms: int = Field(..., description="-1 quando a chave não existe ou expirou.")

class SizeResponse(BaseModel):
    size: int
