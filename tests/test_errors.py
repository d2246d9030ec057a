import json
import logging

from core.errors import InvalidArgumentError, build_error, error_payload
from main import JsonFormatter


def test_build_error_maps_status_codes():
    assert build_error(400, "bad").error_code == "KV-400"
    assert build_error(404, "missing").error_code == "KV-404"
    assert build_error(418, "teapot").error_code == "KV-500"
    assert build_error(409, "conflict").error_code == "KV-500"

    err = build_error(422, "invalid", retryable=True)
    body = err.to_response()
    assert body["id"].startswith("err_")
    assert body["retryable"] is True


def test_error_payload_envelope():
    payload = error_payload(404, "Chave não encontrada.", request_id="req-1")
    assert payload["ok"] is False
    assert payload["data"] is None
    assert payload["detail"] == "Chave não encontrada."
    assert payload["request_id"] == "req-1"
    assert "request_id" not in error_payload(400, "bad")


def test_invalid_argument_is_value_error():
    assert issubclass(InvalidArgumentError, ValueError)


def test_json_formatter_includes_known_extras():
    record = logging.LogRecord("expiring-kv", logging.INFO, __file__, 1, "request", None, None)
    record.request_id = "req-9"
    record.status = 200
    record.secret = "nope"

    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "request"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-9"
    assert payload["status"] == 200
    assert "secret" not in payload


def test_json_formatter_keeps_purge_counters():
    record = logging.LogRecord("expiring-kv", logging.DEBUG, __file__, 1, "kv_purged", None, None)
    record.removed = 2
    record.scheduled = 5

    payload = json.loads(JsonFormatter().format(record))
    assert payload["removed"] == 2
    assert payload["scheduled"] == 5
