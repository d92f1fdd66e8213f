from __future__ import annotations

import pytest
import requests

from spat_signals.common.http import (
    HttpClient,
    HttpRequestError,
    RetryConfig,
    RetryableHttpError,
    UpstreamTimeoutError,
)


class FakeResponse:
    def __init__(self, status_code: int, payload=None, raises_json: bool = False, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self._raises_json = raises_json
        self.text = text

    def json(self):
        if self._raises_json:
            raise ValueError("bad json")
        return self._payload


def test_http_get_json_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, {"ok": True}))
    response = client.get_json("https://example.com")

    assert response.status == 200
    assert response.payload == {"ok": True}


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503, {"x": 1}))

    with pytest.raises(RetryableHttpError):
        client.get_json("https://example.com")


def test_http_retries_until_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.0, max_wait=0.0))
    responses = iter([FakeResponse(502), FakeResponse(200, {"data": []})])
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: next(responses))

    assert client.get_json("https://example.com").payload == {"data": []}


def test_http_invalid_json_raises_with_preview(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(
        client.session,
        "request",
        lambda **_kwargs: FakeResponse(200, raises_json=True, text="<html>nope</html>"),
    )

    with pytest.raises(HttpRequestError) as excinfo:
        client.get_json("https://example.com")
    assert excinfo.value.status == 200
    assert excinfo.value.body_preview == "<html>nope</html>"


def test_http_timeout_maps_to_upstream_timeout(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    def _timeout(**_kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(client.session, "request", _timeout)

    with pytest.raises(UpstreamTimeoutError):
        client.get_json("https://example.com")
