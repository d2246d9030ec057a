import os
import time
import uuid
import json
import logging
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.errors import InvalidArgumentError, error_payload
from routes import jobs, kv, platform, system

# -----------------------------
# Load env
# -----------------------------
load_dotenv()

# -----------------------------
# Logging (structured-ish)
# -----------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logger = logging.getLogger("expiring-kv")
logger.setLevel(LOG_LEVEL)
handler = logging.StreamHandler()
handler.setLevel(LOG_LEVEL)

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "msg": record.getMessage(),
        }
        # extras
        for k in ("request_id", "path", "status", "latency_ms", "removed", "scheduled", "job_id"):
            if hasattr(record, k):
                payload[k] = getattr(record, k)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)

handler.setFormatter(JsonFormatter())
logger.handlers = [handler]

# -----------------------------
# App
# -----------------------------
app = FastAPI(
    title="Expiring KV API",
    description="In-memory key/value store with per-key TTL, demo session log and job scheduler",
    version="0.1.0"
)

# -----------------------------
# CORS
# -----------------------------
origins = os.getenv("ALLOWED_ORIGINS", "*")
allowed = [o.strip() for o in origins.split(",")] if origins != "*" else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# Middleware: request_id + logging
# -----------------------------
@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    start = time.time()

    request.state.request_id = request_id

    try:
        response = await call_next(request)
    except Exception:
        latency_ms = int((time.time() - start) * 1000)
        logger.error(
            "unhandled_exception",
            exc_info=True,
            extra={"request_id": request_id, "path": request.url.path, "status": 500, "latency_ms": latency_ms},
        )
        return JSONResponse(
            status_code=500,
            content=error_payload(500, "Erro interno no servidor.", request_id=request_id),
            headers={"X-Request-Id": request_id},
        )

    latency_ms = int((time.time() - start) * 1000)
    logger.info(
        "request",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "status": response.status_code,
            "latency_ms": latency_ms,
        },
    )
    response.headers["X-Request-Id"] = request_id
    return response

# -----------------------------
# Exception handlers
# -----------------------------
def _error_response(request: Request, status_code: int, message: str, event: str) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    logger.warning(event, extra={"request_id": request_id, "path": request.url.path, "status": status_code})
    return JSONResponse(
        status_code=status_code,
        content=error_payload(status_code, message, request_id=request_id),
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error_response(request, exc.status_code, str(exc.detail), "http_exception")

@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return _error_response(request, 400, str(exc), "invalid_argument")

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()} - {""})
    message = f"Requisição inválida: {', '.join(fields)}" if fields else "Requisição inválida."
    return _error_response(request, 422, message, "validation_error")

# -----------------------------
# Routes
# -----------------------------
app.include_router(system.router)
app.include_router(kv.router)
app.include_router(platform.router)
app.include_router(jobs.router)
