from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field

class RegisterJobRequest(BaseModel):
    """Configuração de um job. Reenviar sobrescreve a configuração."""
    priority: int = Field(..., strict=True, description="Maior número = mais importante (>= 0).")
    cooldown_ms: int = Field(..., strict=True, description="Intervalo mínimo entre execuções, em ms (>= 0).")

class ExecuteNextResponse(BaseModel):
    job_id: Optional[str] = None
    executed: bool

class TopKResponse(BaseModel):
    k: int
    jobs: List[str]

class CooldownResponse(BaseModel):
    job_id: str
    remaining_cooldown_ms: int = Field(..., description="0 quando elegível, -1 quando desconhecido.")
