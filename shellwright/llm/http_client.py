"""Shared HTTP plumbing for provider adapters.

Responsibilities:
- Send one JSON POST per `generate` call with a fixed timeout and no retries.
- Map transport failures and non-2xx statuses onto `TransportError`.
- Redact API-key-like tokens from messages shown to users and logs.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests

from ..errors import ConfigurationError, ParseError, TransportError


DEFAULT_TIMEOUT_SECONDS = 30.0


class JsonHttpClient:
    """Base adapter holding endpoint, credentials, and error mapping."""

    provider_label = "Provider"
    default_endpoint = ""
    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        endpoint: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize adapter settings, failing fast on a missing API key."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        if not self.api_key:
            raise ConfigurationError(f"{self.provider_label} API key not found.")
        self.model = model
        self.endpoint = (endpoint or "").strip() or self.default_endpoint
        self.timeout_seconds = timeout_seconds

    def name(self) -> str:
        """Return the provider display name."""

        return self.provider_label

    def is_available(self) -> bool:
        """Return whether an API key is present; not a liveness probe."""

        return bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        """Return provider-specific request headers."""

        raise NotImplementedError

    def _post_json(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON object."""

        try:
            response = requests.post(
                self.endpoint,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = f"{self.provider_label} request timed out."
            else:
                detail = (
                    f"{self.provider_label} request transport error: "
                    f"{self._short_message(self._redact_sensitive_tokens(str(exc)))}"
                )
            raise TransportError(
                detail, provider=self.provider_label, failure_kind=failure_kind
            ) from exc
        except TimeoutError as exc:
            raise TransportError(
                f"{self.provider_label} request timed out.",
                provider=self.provider_label,
                failure_kind="timeout",
            ) from exc

        body = self._decode_body(response)
        if not 200 <= response.status_code < 300:
            raise self._http_status_error(response.status_code, body)

        try:
            decoded = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"{self.provider_label} returned invalid JSON payload.",
                provider=self.provider_label,
                failure_kind="parse",
                status_code=response.status_code,
                body=body,
            ) from exc
        if not isinstance(decoded, dict):
            raise self._parse_error("response is not a JSON object.")
        return decoded

    def _parse_error(self, detail: str) -> ParseError:
        """Build a parse error for a malformed response payload."""

        return ParseError(
            f"{self.provider_label} {detail}",
            provider=self.provider_label,
            failure_kind="parse",
        )

    @staticmethod
    def _decode_body(response: requests.Response) -> str:
        """Decode a response body into a best-effort UTF-8 string."""

        return bytes(response.content or b"").decode("utf-8", errors="replace").strip()

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
        redacted = re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
            "Bearer [redacted-token]",
            redacted,
        )
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise provider message and optional provider error code."""

        if not body:
            return "", None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body)), None

        provider_code: str | None = None
        message: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                for code_key in ("code", "type"):
                    code_value = error_payload.get(code_key)
                    if isinstance(code_value, str) and code_value.strip():
                        provider_code = code_value.strip()
                        break
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()

        if message is None:
            message = body

        return cls._short_message(cls._redact_sensitive_tokens(message)), provider_code

    @staticmethod
    def _classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_code: str | None,
    ) -> str:
        """Classify HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        normalized_code = provider_code.lower() if provider_code is not None else ""

        if status_code == 401 or "api key" in message_lower:
            return "invalid_api_key"
        if normalized_code == "insufficient_quota" or (
            status_code == 429 and "quota" in message_lower
        ):
            return "insufficient_quota"
        if normalized_code == "model_not_found" or (
            "model" in message_lower
            and any(phrase in message_lower for phrase in ("not found", "does not exist", "invalid"))
        ):
            return "invalid_model"
        if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    def _http_status_error(self, status_code: int, body: str) -> TransportError:
        """Convert a non-2xx response into a transport error carrying status and body."""

        provider_message, provider_code = self._extract_provider_message(body)
        failure_kind = self._classify_http_failure(status_code, provider_message, provider_code)

        headline = {
            "invalid_api_key": f"{self.provider_label} authentication failed",
            "insufficient_quota": f"{self.provider_label} quota is insufficient for this request",
            "invalid_model": f"{self.provider_label} rejected the selected model",
            "timeout": f"{self.provider_label} request timed out",
        }.get(failure_kind, f"{self.provider_label} API error")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."

        return TransportError(
            detail,
            provider=self.provider_label,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
            body=body,
        )
