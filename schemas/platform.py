from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

class AppendLogRequest(BaseModel):
    """Evento emitido por uma demo no frontend."""
    demo: str = Field(..., min_length=1)
    method: str = Field(..., min_length=1)
    args: Optional[Dict[str, Any]] = None
    result: Any = None

class LogEventOut(BaseModel):
    ts_ms: int
    demo: str
    method: str
    args: Dict[str, Any] = Field(default_factory=dict)
    result: Any = None

class AppendLogResponse(BaseModel):
    appended: bool = True
    count: int
    event: LogEventOut

class SessionLogResponse(BaseModel):
    sid: str
    events: List[LogEventOut]
