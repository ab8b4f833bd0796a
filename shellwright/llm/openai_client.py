"""OpenAI-style chat-completions adapter."""

from __future__ import annotations

from typing import Any

from ..models.datatypes import TranslationRequest, TranslationResponse, Usage
from .http_client import JsonHttpClient


OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIChatProvider(JsonHttpClient):
    """Minimal requests-based OpenAI chat-completions provider."""

    provider_label = "OpenAI"
    default_endpoint = OPENAI_CHAT_COMPLETIONS_URL

    def _headers(self) -> dict[str, str]:
        """Return bearer-token headers."""

        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def generate(self, request: TranslationRequest) -> TranslationResponse:
        """Send one system and one user message and parse the first choice."""

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": request.context or ""},
                {"role": "user", "content": request.prompt},
            ],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        return self._parse_response(self._post_json(payload))

    def _parse_response(self, payload: dict[str, Any]) -> TranslationResponse:
        """Extract content, finish reason, and usage from a chat-completions payload."""

        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self._parse_error("response missing non-empty `choices` list.")

        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            raise self._parse_error("response `choices[0]` is malformed.")

        message = first_choice.get("message")
        if not isinstance(message, dict):
            raise self._parse_error("response missing `choices[0].message` object.")

        content = message.get("content")
        if not isinstance(content, str):
            raise self._parse_error("response `choices[0].message.content` is not text.")

        finish_reason = first_choice.get("finish_reason")
        return TranslationResponse(
            content=content.strip(),
            finish_reason=finish_reason if isinstance(finish_reason, str) else "",
            usage=self._parse_usage(payload.get("usage")),
        )

    @staticmethod
    def _parse_usage(raw_usage: object) -> Usage | None:
        """Parse the optional `usage` block."""

        if not isinstance(raw_usage, dict):
            return None
        try:
            return Usage(
                prompt_tokens=int(raw_usage["prompt_tokens"]),
                completion_tokens=int(raw_usage["completion_tokens"]),
                total_tokens=int(raw_usage["total_tokens"]),
            )
        except (KeyError, TypeError, ValueError):
            return None
