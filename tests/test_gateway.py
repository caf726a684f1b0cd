"""Unit tests for path normalization, origin policies and frame helpers."""
import pytest

from streamgate.core.security.origin import allow_all_origins, allowlist_policy, policy_from_settings
from streamgate.core.websocket.gateway import header_value, normalize_path
from streamgate.core.websocket.handler import build_ack, frame_payload


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("/audio-stream", "/audio-stream"),
        ("/audio-stream/", "/audio-stream"),
        ("/audio-stream///", "/audio-stream"),
        ("/", "/"),
        ("///", "/"),
        ("", "/"),
        ("/a/b/", "/a/b"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_header_value_is_case_insensitive_on_raw_keys():
    scope = {"headers": [(b"host", b"example.com"), (b"origin", b"https://a.example")]}
    assert header_value(scope, b"origin") == "https://a.example"
    assert header_value(scope, b"x-missing") is None
    assert header_value({}, b"origin") is None


def test_allow_all_accepts_missing_and_any_origin():
    assert allow_all_origins(None) is True
    assert allow_all_origins("") is True
    assert allow_all_origins("http://anything.example") is True


def test_allowlist_policy():
    policy = allowlist_policy(["https://App.example.com/", " http://localhost:3000 "])
    assert policy("https://app.example.com") is True
    assert policy("https://app.example.com/") is True
    assert policy("http://localhost:3000") is True
    assert policy("http://localhost:3001") is False
    assert policy(None) is False
    assert policy("") is False


def test_policy_from_settings(monkeypatch):
    from streamgate.core.config import settings

    monkeypatch.setattr(settings, "allowed_ws_origins", "")
    assert policy_from_settings() is allow_all_origins

    monkeypatch.setattr(settings, "allowed_ws_origins", "https://a.example, https://b.example")
    policy = policy_from_settings()
    assert policy("https://b.example") is True
    assert policy("https://c.example") is False


def test_frame_helpers():
    assert frame_payload({"type": "websocket.receive", "bytes": b"\x00\x01"}) == b"\x00\x01"
    assert frame_payload({"type": "websocket.receive", "text": "ü"}) == "ü".encode("utf-8")
    assert frame_payload({"type": "websocket.receive", "bytes": None, "text": "abc"}) == b"abc"
    assert frame_payload({"type": "websocket.receive"}) == b""
    assert build_ack(42) == {"type": "ack", "bytes": 42}


def test_settings_defaults(monkeypatch):
    from streamgate.core.config import Settings

    for name in ("PORT", "HEARTBEAT_INTERVAL", "CORS_ORIGINS", "ALLOWED_WS_ORIGINS", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.port == 8080
    assert s.heartbeat_interval == 25.0
    assert s.cors_origin_list == ["*"]
    assert s.ws_origin_list == []
    assert s.debug is False


def test_settings_from_environment(monkeypatch):
    from streamgate.core.config import Settings

    monkeypatch.setenv("PORT", "9001")
    monkeypatch.setenv("DEBUG", "yes")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
    s = Settings(_env_file=None)
    assert s.port == 9001
    assert s.debug is True
    assert s.cors_origin_list == ["https://a.example", "https://b.example"]


def test_keepalive_options_follow_heartbeat_interval(monkeypatch):
    from streamgate.core.config import settings
    from streamgate.core.main import websocket_keepalive

    monkeypatch.setattr(settings, "heartbeat_interval", 25.0)
    assert websocket_keepalive() == {"ws_ping_interval": 25.0, "ws_ping_timeout": 25.0}
    assert websocket_keepalive(0.5) == {"ws_ping_interval": 0.5, "ws_ping_timeout": 0.5}
