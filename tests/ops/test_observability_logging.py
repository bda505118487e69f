import json
import logging
from types import SimpleNamespace

from starlette.requests import Request
from starlette.responses import Response

from app.tcg.core.context import Principal
from app.tcg.middleware.observability import build_request_log_payload
from tests.tcg_helpers import auth, create_user, login


def test_build_request_log_payload():
    scope = {
        "type": "http",
        "method": "PATCH",
        "path": "/api/transfer-requests/abc/status",
        "headers": [],
        "route": SimpleNamespace(path="/api/transfer-requests/{transfer_id}/status"),
    }
    request = Request(scope)
    request.state.trace_id = "trace-1"
    request.state.user_id = "user-1"
    request.state.principal = Principal(user_id="user-1", role="store-manager", assigned_store_id="store-1")
    request.state.error_code = "INVALID_TRANSITION"
    response = Response(status_code=409)

    payload = build_request_log_payload(
        request=request,
        response=response,
        latency_ms=12.3456,
        db_time_ms=4.5678,
    )

    assert payload["event"] == "http_request"
    assert payload["trace_id"] == "trace-1"
    assert payload["user_id"] == "user-1"
    assert payload["role"] == "store-manager"
    assert payload["route"] == "/api/transfer-requests/{transfer_id}/status"
    assert payload["method"] == "PATCH"
    assert payload["status_code"] == 409
    assert payload["error_code"] == "INVALID_TRANSITION"
    assert payload["latency_ms"] == 12.35
    assert payload["db_time_ms"] == 4.57


def test_build_request_log_payload_without_response():
    request = Request({"type": "http", "method": "GET", "path": "/health", "headers": []})

    payload = build_request_log_payload(request=request, response=None, latency_ms=1.0, db_time_ms=None)

    assert payload["route"] == "/health"
    assert payload["status_code"] == 500
    assert payload["user_id"] is None
    assert payload["db_time_ms"] is None


def test_request_log_emitted_per_request(client, db_session, caplog):
    create_user(db_session, username="partner-1", role="partner")
    token = login(client, "partner-1")

    with caplog.at_level(logging.INFO, logger="tcg.request"):
        response = client.get("/api/stores", headers=auth(token, **{"X-Trace-ID": "trace-log-1"}))
    assert response.status_code == 200

    events = [json.loads(record.getMessage()) for record in caplog.records if record.name == "tcg.request"]
    entry = next(event for event in events if event["trace_id"] == "trace-log-1")
    assert entry["route"] == "/api/stores"
    assert entry["status_code"] == 200
    assert entry["role"] == "partner"
    assert entry["db_time_ms"] is not None
