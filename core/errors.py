from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


HTTP_TO_KV_CODE = {
    400: "KV-400",
    404: "KV-404",
    422: "KV-422",
    500: "KV-500",
}


class InvalidArgumentError(ValueError):
    """Rejected input: raised before any state is touched."""


@dataclass(frozen=True)
class KVError:
    error_id: str
    error_code: str
    message: str
    retryable: bool

    def to_response(self) -> dict:
        return {
            "id": self.error_id,
            "code": self.error_code,
            "message": self.message,
            "retryable": self.retryable,
        }


def build_error(status_code: int, message: str, *, retryable: bool = False) -> KVError:
    return KVError(
        error_id=f"err_{uuid4().hex[:12]}",
        error_code=HTTP_TO_KV_CODE.get(status_code, "KV-500"),
        message=message,
        retryable=retryable,
    )


def error_payload(status_code: int, message: str, *, request_id: str | None = None) -> dict:
    err = build_error(status_code, message)
    payload = {
        "ok": False,
        "data": None,
        "error": err.to_response(),
        "detail": message,
    }
    if request_id:
        payload["request_id"] = request_id
    return payload
