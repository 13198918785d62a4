from __future__ import annotations

import pytest
import requests

from src.explain.client import BackendUnavailableError, ChatCompletionClient, GenerationError
from src.explain.settings import GenerationSettings

MESSAGES = [{"role": "system", "content": "sys"}, {"role": "user", "content": "user"}]


class _FakeResponse:
    def __init__(self, status_code: int, body: object = None, *, invalid_json: bool = False) -> None:
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    def json(self) -> object:
        if self._invalid_json:
            raise ValueError("not json")
        return self._body


def _client(monkeypatch, response: object, captured: dict[str, object] | None = None) -> ChatCompletionClient:
    client = ChatCompletionClient(base_url="https://llm.example/v1/", model="test-model", api_token="secret")

    def fake_post(url, json=None, timeout=None):
        if captured is not None:
            captured.update({"url": url, "json": json, "timeout": timeout})
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(client._session, "post", fake_post)
    return client


def test_complete_posts_chat_payload_and_returns_content(monkeypatch) -> None:
    captured: dict[str, object] = {}
    body = {"choices": [{"message": {"role": "assistant", "content": "Generated."}}]}
    client = _client(monkeypatch, _FakeResponse(200, body), captured)

    text = client.complete(MESSAGES, max_tokens=500, temperature=0.6)

    assert text == "Generated."
    assert captured["url"] == "https://llm.example/v1/chat/completions"
    assert captured["json"] == {
        "model": "test-model",
        "messages": MESSAGES,
        "max_tokens": 500,
        "temperature": 0.6,
    }
    assert captured["timeout"] == (5.0, 30.0)
    assert client._session.headers["Authorization"] == "Bearer secret"


@pytest.mark.parametrize("status_code", [429, 503])
def test_complete_maps_unavailable_statuses(monkeypatch, status_code: int) -> None:
    client = _client(monkeypatch, _FakeResponse(status_code))

    with pytest.raises(BackendUnavailableError) as excinfo:
        client.complete(MESSAGES, max_tokens=10, temperature=0.0)

    assert excinfo.value.status_code == status_code


def test_complete_raises_generation_error_for_server_errors(monkeypatch) -> None:
    client = _client(monkeypatch, _FakeResponse(500))

    with pytest.raises(GenerationError) as excinfo:
        client.complete(MESSAGES, max_tokens=10, temperature=0.0)

    assert not isinstance(excinfo.value, BackendUnavailableError)


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse(200, invalid_json=True),
        _FakeResponse(200, {"choices": []}),
        _FakeResponse(200, {"choices": [{"message": {"content": "   "}}]}),
    ],
)
def test_complete_rejects_unusable_bodies(monkeypatch, response: _FakeResponse) -> None:
    client = _client(monkeypatch, response)

    with pytest.raises(GenerationError):
        client.complete(MESSAGES, max_tokens=10, temperature=0.0)


def test_complete_wraps_transport_errors(monkeypatch) -> None:
    client = _client(monkeypatch, requests.ConnectionError("refused"))

    with pytest.raises(GenerationError, match="failed"):
        client.complete(MESSAGES, max_tokens=10, temperature=0.0)


def test_from_settings_copies_backend_fields() -> None:
    settings = GenerationSettings(base_url="https://other.example/v1", model="m", timeout_seconds=12.0)

    client = ChatCompletionClient.from_settings(settings)

    assert client.endpoint == "https://other.example/v1/chat/completions"
    assert client.model == "m"
    assert "Authorization" not in client._session.headers
    client.close()
