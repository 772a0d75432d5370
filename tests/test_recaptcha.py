"""Tests for reCAPTCHA verification against a mocked verify endpoint."""

import httpx
import pytest

from carwash.config import settings
from carwash.recaptcha import verify_recaptcha


@pytest.fixture
def google(monkeypatch):
    """Route reCAPTCHA calls to a handler; set `google["reply"]` per test."""
    monkeypatch.setattr(settings, "recaptcha_secret_key", "test-secret")

    state = {"reply": {"success": True, "score": 0.9, "action": "booking"}, "requests": []}

    def handler(request):
        state["requests"].append(request)
        reply = state["reply"]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, int):
            return httpx.Response(reply)
        if isinstance(reply, str):
            return httpx.Response(200, text=reply)
        return httpx.Response(200, json=reply)

    real_client = httpx.Client
    monkeypatch.setattr(
        "carwash.recaptcha.httpx.Client",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    return state


def test_not_configured_passes(monkeypatch):
    monkeypatch.setattr(settings, "recaptcha_secret_key", None)
    assert verify_recaptcha(None).success


def test_valid_token(google):
    result = verify_recaptcha("token", ip="10.0.0.1")
    assert result.success
    assert result.score == 0.9

    body = google["requests"][0].content
    assert b"secret=test-secret" in body
    assert b"remoteip=10.0.0.1" in body


def test_missing_token(google):
    result = verify_recaptcha(None)
    assert not result.success
    assert google["requests"] == []


def test_rejected_token(google):
    google["reply"] = {"success": False, "error-codes": ["timeout-or-duplicate"]}
    result = verify_recaptcha("token")
    assert not result.success
    assert result.error == "timeout-or-duplicate"


def test_action_mismatch(google):
    google["reply"] = {"success": True, "score": 0.9, "action": "login"}
    assert verify_recaptcha("token").error == "Action mismatch"


def test_low_score(google):
    google["reply"] = {"success": True, "score": 0.2, "action": "booking"}
    result = verify_recaptcha("token")
    assert not result.success
    assert result.score == 0.2


def test_service_down_fails_open(google):
    google["reply"] = httpx.ConnectError("connection refused")
    assert verify_recaptcha("token").success

    google["reply"] = 503
    assert verify_recaptcha("token").success


@pytest.mark.parametrize("reply", ["<html>upstream error</html>", "[1, 2]"])
def test_unreadable_reply_fails_open(google, reply):
    google["reply"] = reply
    assert verify_recaptcha("token").success
