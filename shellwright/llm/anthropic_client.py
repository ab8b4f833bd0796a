"""Anthropic-style messages adapter."""

from __future__ import annotations

from typing import Any

from ..models.datatypes import TranslationRequest, TranslationResponse, Usage
from .http_client import JsonHttpClient


ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_API_VERSION = "2023-06-01"


class AnthropicMessagesProvider(JsonHttpClient):
    """Minimal requests-based Anthropic messages provider."""

    provider_label = "Anthropic"
    default_endpoint = ANTHROPIC_MESSAGES_URL

    def _headers(self) -> dict[str, str]:
        """Return `x-api-key` and version headers."""

        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
            "Content-Type": "application/json",
        }

    def generate(self, request: TranslationRequest) -> TranslationResponse:
        """Send the prompt, with a system message only when context is present."""

        messages: list[dict[str, str]] = []
        if request.context is not None:
            messages.append({"role": "system", "content": request.context})
        messages.append({"role": "user", "content": request.prompt})

        payload = {
            "model": self.model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": messages,
        }
        return self._parse_response(self._post_json(payload))

    def _parse_response(self, payload: dict[str, Any]) -> TranslationResponse:
        """Join all text content blocks and map usage fields."""

        content = payload.get("content")
        if not isinstance(content, list) or not content:
            raise self._parse_error("response missing non-empty `content` list.")

        texts: list[str] = []
        for block in content:
            if not isinstance(block, dict):
                raise self._parse_error("response `content` entry is malformed.")
            if block.get("type") != "text":
                continue
            text = block.get("text")
            if not isinstance(text, str):
                raise self._parse_error("response text block is missing `text`.")
            texts.append(text)

        stop_reason = payload.get("stop_reason")
        return TranslationResponse(
            content=" ".join(texts).strip(),
            finish_reason=stop_reason if isinstance(stop_reason, str) else "",
            usage=self._parse_usage(payload.get("usage")),
        )

    @staticmethod
    def _parse_usage(raw_usage: object) -> Usage | None:
        """Map `input_tokens`/`output_tokens` onto the shared usage record."""

        if not isinstance(raw_usage, dict):
            return None
        try:
            input_tokens = int(raw_usage["input_tokens"])
            output_tokens = int(raw_usage["output_tokens"])
        except (KeyError, TypeError, ValueError):
            return None
        return Usage(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )
