"""HTTP surface: root health, JSON health, clear-buffer."""
import time

from fastapi.testclient import TestClient

from streamgate.core.main import create_app


def _client() -> TestClient:
    return TestClient(create_app(heartbeat_interval=3600))


def test_root_returns_ok():
    r = _client().get("/")
    assert r.status_code == 200
    assert r.text == "OK"
    assert r.headers["content-type"].startswith("text/plain")


def test_root_head_for_uptime_monitors():
    r = _client().head("/")
    assert r.status_code == 200


def test_api_health_payload():
    before = int(time.time() * 1000)
    r = _client().get("/api/health")
    after = int(time.time() * 1000)
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert isinstance(body["ts"], int)
    assert before <= body["ts"] <= after


def test_clear_buffer_with_json():
    r = _client().post("/api/coaching/clear-buffer", json={"sessionId": "abc"})
    assert r.status_code == 204
    assert r.content == b""


def test_clear_buffer_without_body():
    r = _client().post("/api/coaching/clear-buffer")
    assert r.status_code == 204
    assert r.content == b""


def test_clear_buffer_ignores_malformed_payload():
    r = _client().post(
        "/api/coaching/clear-buffer",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 204
    assert r.content == b""


def test_unknown_route_is_404():
    r = _client().get("/nope")
    assert r.status_code == 404
