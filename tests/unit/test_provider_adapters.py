"""Unit tests for OpenAI-style and Anthropic-style provider adapters."""

from __future__ import annotations

import json
from typing import Any

import pytest

from shellwright.errors import ConfigurationError, ParseError, TransportError
from shellwright.llm import http_client
from shellwright.llm.anthropic_client import (
    ANTHROPIC_API_VERSION,
    ANTHROPIC_MESSAGES_URL,
    AnthropicMessagesProvider,
)
from shellwright.llm.openai_client import OPENAI_CHAT_COMPLETIONS_URL, OpenAIChatProvider
from shellwright.models.datatypes import TranslationRequest, Usage


class _MockRequestsResponse:
    """Minimal requests response mock for HTTP transport patching."""

    def __init__(self, *, payload: bytes, status_code: int = 200) -> None:
        """Initialize response with raw payload bytes and HTTP status."""

        self.content = payload
        self.status_code = status_code


class _RecordingPost:
    """Callable `requests.post` replacement that records its arguments."""

    def __init__(self, response: _MockRequestsResponse) -> None:
        """Initialize with the response returned for every call."""

        self.response = response
        self.calls: list[dict[str, Any]] = []

    def __call__(self, url: str, **kwargs: Any) -> _MockRequestsResponse:
        """Record call arguments and return the configured response."""

        self.calls.append({"url": url, **kwargs})
        return self.response


def _install_post(
    monkeypatch: pytest.MonkeyPatch, payload: object, status_code: int = 200
) -> _RecordingPost:
    """Patch the HTTP transport with a recording double."""

    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    recorder = _RecordingPost(_MockRequestsResponse(payload=body, status_code=status_code))
    monkeypatch.setattr("shellwright.llm.http_client.requests.post", recorder)
    return recorder


def test_openai_adapter_sends_system_and_user_messages(monkeypatch: pytest.MonkeyPatch) -> None:
    """OpenAI adapter should post one system and one user message with bearer auth."""

    recorder = _install_post(
        monkeypatch,
        {
            "choices": [{"message": {"content": "  ls -la \n"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
        },
    )
    provider = OpenAIChatProvider(api_key="sk-test", model="gpt-3.5-turbo", timeout_seconds=5.0)

    response = provider.generate(TranslationRequest(prompt="list files", max_tokens=50))

    assert response.content == "ls -la"
    assert response.finish_reason == "stop"
    assert response.usage == Usage(prompt_tokens=12, completion_tokens=3, total_tokens=15)

    call = recorder.calls[0]
    assert call["url"] == OPENAI_CHAT_COMPLETIONS_URL
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["timeout"] == 5.0
    assert call["json"] == {
        "model": "gpt-3.5-turbo",
        "messages": [
            {"role": "system", "content": ""},
            {"role": "user", "content": "list files"},
        ],
        "max_tokens": 50,
        "temperature": 0.1,
    }


def test_openai_adapter_uses_endpoint_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """An explicit endpoint replaces the public API URL."""

    recorder = _install_post(
        monkeypatch, {"choices": [{"message": {"content": "pwd"}}]}
    )
    provider = OpenAIChatProvider(
        api_key="sk-test", model="m", endpoint="http://localhost:8080/v1/chat/completions"
    )

    response = provider.generate(TranslationRequest(prompt="where am I", context="ctx"))

    assert recorder.calls[0]["url"] == "http://localhost:8080/v1/chat/completions"
    assert recorder.calls[0]["json"]["messages"][0] == {"role": "system", "content": "ctx"}
    assert response.finish_reason == ""
    assert response.usage is None


def test_openai_adapter_empty_choices_is_parse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """An empty `choices` list should surface as a parse error."""

    _install_post(monkeypatch, {"choices": []})
    provider = OpenAIChatProvider(api_key="sk-test", model="m")

    with pytest.raises(ParseError, match="choices"):
        provider.generate(TranslationRequest(prompt="list files"))


def test_openai_adapter_invalid_json_is_parse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """A non-JSON 200 body should surface as a parse error carrying the body."""

    _install_post(monkeypatch, b"<html>oops</html>")
    provider = OpenAIChatProvider(api_key="sk-test", model="m")

    with pytest.raises(ParseError) as exc_info:
        provider.generate(TranslationRequest(prompt="list files"))

    assert exc_info.value.body == "<html>oops</html>"


def test_openai_adapter_maps_401_to_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Non-2xx responses should carry status code, body, and failure kind."""

    body = {"error": {"message": "Incorrect API key provided: sk-abcdefghijkl", "code": "invalid_api_key"}}
    _install_post(monkeypatch, body, status_code=401)
    provider = OpenAIChatProvider(api_key="sk-test", model="m")

    with pytest.raises(TransportError) as exc_info:
        provider.generate(TranslationRequest(prompt="list files"))

    error = exc_info.value
    assert error.status_code == 401
    assert error.failure_kind == "invalid_api_key"
    assert error.provider_code == "invalid_api_key"
    assert json.loads(error.body) == body
    assert "OpenAI authentication failed (HTTP 401)" in str(error)
    assert "sk-abcdefghijkl" not in str(error)
    assert "[redacted-key]" in str(error)


def test_openai_adapter_maps_quota_and_generic_http_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Quota exhaustion and other statuses should classify deterministically."""

    _install_post(
        monkeypatch,
        {"error": {"message": "You exceeded your current quota.", "code": "insufficient_quota"}},
        status_code=429,
    )
    provider = OpenAIChatProvider(api_key="sk-test", model="m")
    with pytest.raises(TransportError) as quota_error:
        provider.generate(TranslationRequest(prompt="list files"))
    assert quota_error.value.failure_kind == "insufficient_quota"

    _install_post(monkeypatch, b"", status_code=500)
    with pytest.raises(TransportError) as server_error:
        provider.generate(TranslationRequest(prompt="list files"))
    assert server_error.value.failure_kind == "http_error"
    assert str(server_error.value) == "OpenAI API error (HTTP 500)."


def test_adapter_maps_timeouts_and_connection_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    """Transport exceptions from `requests` should become transport errors."""

    def _timeout(*args: object, **kwargs: object) -> None:
        """Raise a requests timeout."""

        raise http_client.requests.Timeout("read timed out")

    monkeypatch.setattr("shellwright.llm.http_client.requests.post", _timeout)
    provider = OpenAIChatProvider(api_key="sk-test", model="m")

    with pytest.raises(TransportError) as timeout_error:
        provider.generate(TranslationRequest(prompt="list files"))
    assert timeout_error.value.failure_kind == "timeout"
    assert timeout_error.value.status_code is None

    def _refused(*args: object, **kwargs: object) -> None:
        """Raise a requests connection error."""

        raise http_client.requests.ConnectionError("connection refused")

    monkeypatch.setattr("shellwright.llm.http_client.requests.post", _refused)
    with pytest.raises(TransportError) as connection_error:
        provider.generate(TranslationRequest(prompt="list files"))
    assert connection_error.value.failure_kind == "transport"
    assert "connection refused" in str(connection_error.value)


def test_anthropic_adapter_sends_version_header_and_omits_empty_system(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Anthropic adapter should omit the system message without context."""

    recorder = _install_post(
        monkeypatch,
        {
            "content": [
                {"type": "text", "text": "find ."},
                {"type": "tool_use", "id": "ignored"},
                {"type": "text", "text": "-name '*.py'"},
            ],
            "stop_reason": "end_turn",
            "usage": {"input_tokens": 20, "output_tokens": 5},
        },
    )
    provider = AnthropicMessagesProvider(api_key="anthropic-key", model="claude-test")

    response = provider.generate(TranslationRequest(prompt="find python files"))

    assert response.content == "find . -name '*.py'"
    assert response.finish_reason == "end_turn"
    assert response.usage == Usage(prompt_tokens=20, completion_tokens=5, total_tokens=25)

    call = recorder.calls[0]
    assert call["url"] == ANTHROPIC_MESSAGES_URL
    assert call["headers"]["x-api-key"] == "anthropic-key"
    assert call["headers"]["anthropic-version"] == ANTHROPIC_API_VERSION
    assert call["json"]["messages"] == [{"role": "user", "content": "find python files"}]


def test_anthropic_adapter_includes_system_message_with_context(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A present context should be sent ahead of the user message."""

    recorder = _install_post(monkeypatch, {"content": [{"type": "text", "text": "pwd"}]})
    provider = AnthropicMessagesProvider(api_key="anthropic-key", model="claude-test")

    provider.generate(TranslationRequest(prompt="where am I", context="be terse"))

    assert recorder.calls[0]["json"]["messages"][0] == {"role": "system", "content": "be terse"}


def test_anthropic_adapter_empty_content_is_parse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """An empty `content` list should surface as a parse error."""

    _install_post(monkeypatch, {"content": []})
    provider = AnthropicMessagesProvider(api_key="anthropic-key", model="claude-test")

    with pytest.raises(ParseError, match="content"):
        provider.generate(TranslationRequest(prompt="list files"))


@pytest.mark.parametrize("adapter", [OpenAIChatProvider, AnthropicMessagesProvider])
@pytest.mark.parametrize("api_key", [None, "", "   "])
def test_adapters_require_api_key_at_construction(adapter: type, api_key: str | None) -> None:
    """A missing key fails fast, before any network call."""

    with pytest.raises(ConfigurationError, match="API key not found"):
        adapter(api_key=api_key, model="m")


def test_adapter_reports_name_and_availability() -> None:
    """Adapters expose a display name and key-presence availability."""

    provider = AnthropicMessagesProvider(api_key="anthropic-key", model="claude-test")

    assert provider.name() == "Anthropic"
    assert provider.is_available() is True
