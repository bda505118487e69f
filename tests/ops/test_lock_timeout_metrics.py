from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.tcg.core.errors import setup_exception_handlers
from app.tcg.core.metrics import metrics


def test_lock_timeout_increments_metric():
    metrics.reset()
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/lock-timeout")
    def lock_timeout():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/lock-timeout")

    assert response.status_code == 409
    assert response.json()["code"] == "LOCK_TIMEOUT"

    snapshot = metrics.render()
    content = snapshot.content.decode("utf-8")
    if metrics.enabled:
        assert "lock_wait_timeout_total 1.0" in content
    else:
        assert "metrics_disabled" in content


def test_transition_and_denial_counters():
    metrics.reset()
    metrics.increment_transfer_transition("requested", "sent")
    metrics.increment_permission_denied("TRANSFER_TRANSITION")
    metrics.increment_capacity_rejected()

    content = metrics.render().content.decode("utf-8")
    if not metrics.enabled:
        assert "metrics_disabled" in content
        return
    assert 'transfer_transitions_total{from_status="requested",to_status="sent"} 1.0' in content
    assert 'permission_denied_total{action="TRANSFER_TRANSITION"} 1.0' in content
    assert "capacity_rejected_total 1.0" in content
