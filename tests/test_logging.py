import json
import logging

from tabletap.app.middlewares.logging import _redact
from tabletap.app.obs.logging import JsonFormatter, _redact_pii


def test_redact_pii_in_messages():
    text = "owner a.b@cafe.test token 123456789:AAHdqTcvCH1vGWJxfSeofSAs0K5PALDsaw call 9876543210"
    assert _redact_pii(text) == "owner *** token *** call ***"


def test_request_bodies_are_redacted():
    body = {
        "email": "a@b.test",
        "password": "pw",
        "cafe": {"telegram_bot_token": "1:x", "telegram_chat_id": "42"},
        "items": [{"code": "abc", "name": "Latte"}],
    }
    assert _redact(body) == {
        "email": "***",
        "password": "***",
        "cafe": {"telegram_bot_token": "***", "telegram_chat_id": "42"},
        "items": [{"code": "***", "name": "Latte"}],
    }


def test_json_formatter_fields():
    record = logging.LogRecord("api", logging.WARNING, __file__, 1, "hi %s", ("x@y.test",), None)
    record.cafe = "c1"
    data = json.loads(JsonFormatter().format(record))
    assert data["msg"] == "hi ***"
    assert data["level"] == "WARNING"
    assert data["cafe"] == "c1"


def test_health_and_request_id(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc"})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "data": {"status": "ok"}}
    assert resp.headers["X-Request-ID"] == "abc"


def test_not_found_uses_error_envelope(client):
    resp = client.get("/missing")
    assert resp.status_code == 404
    body = resp.json()
    assert body["ok"] is False
    assert body["error"]["code"] == 404
    assert body["request_id"]


def test_metrics_exposed(client):
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert 'notifications_failed_total{channel="telegram"}' in resp.text
