"""Natural-language to command translation service.

Responsibilities:
- Gate every turn on the `enable_llm` and `offline_mode` flags before any
  network-capable step, so offline mode never builds a provider client.
- Classify input, render the prompt, and dispatch through the cached client.
- Downgrade provider failures to "no translation" when fallback is enabled.

Per-turn states:
`NOT_TRANSLATED` (disabled, offline, or not natural language),
`TRANSLATED` (cache hit or provider success), and
`PROVIDER_FAILED` (error downgraded under fallback).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from typing import Callable

from .config import FeatureSettings, LLMConfig
from .errors import ParseError, ProviderError, ShellwrightError
from .llm.classifier import is_natural_language
from .llm.client import LLMClient
from .llm.prompts import PromptTemplate, detect_os
from .models.datatypes import TranslationRequest, Usage
from .provider_factory import ProviderFactory
from .telemetry.logger import RunLogger
from .telemetry.usage_tracker import UsageTracker


_CODE_FENCE_PATTERN = re.compile(r"^```(?:[\w-]+[ \t]*\n)?\s*(.*?)\s*```$", re.DOTALL)
_WRAPPING_PAIRS = (("`", "`"), ('"', '"'), ("'", "'"))


class TranslationState(Enum):
    """Terminal state of one translation turn."""

    NOT_TRANSLATED = "not_translated"
    TRANSLATED = "translated"
    PROVIDER_FAILED = "provider_failed"


@dataclass(frozen=True, slots=True)
class TranslationOutcome:
    """Result of one turn; `command` is set only when translated."""

    state: TranslationState
    command: str | None = None
    cache_hit: bool = False
    usage: Usage | None = None
    error: ShellwrightError | None = None

    @property
    def translated(self) -> bool:
        """Return whether a command is available."""

        return self.state is TranslationState.TRANSLATED


def clean_model_output(content: str) -> str:
    """Strip whitespace plus one surrounding code fence or quote pair.

    A fence language tag counts only when a newline follows it, and a quote
    pair is removed only when the inner text holds no other copy of that
    quote, so quoted arguments inside a command survive.
    """

    text = content.strip()
    fenced = _CODE_FENCE_PATTERN.match(text)
    if fenced is not None:
        text = fenced.group(1).strip()
    for opening, closing in _WRAPPING_PAIRS:
        if len(text) < 2 or not (text.startswith(opening) and text.endswith(closing)):
            continue
        inner = text[1:-1]
        if opening in inner or closing in inner:
            continue
        text = inner.strip()
        break
    return text


class TranslationService:
    """Orchestrate classifier, prompt template, and cached provider client."""

    def __init__(
        self,
        features: FeatureSettings,
        llm_config_resolver: Callable[[], LLMConfig],
        client_factory: Callable[[LLMConfig], LLMClient] | None = None,
        prompt_template: PromptTemplate | None = None,
        os_id: str | None = None,
        run_logger: RunLogger | None = None,
        usage_tracker: UsageTracker | None = None,
    ) -> None:
        """Initialize the service; the provider client is built on first use."""

        self.features = features
        self._llm_config_resolver = llm_config_resolver
        self._client_factory = client_factory
        self.prompts = prompt_template if prompt_template is not None else PromptTemplate()
        self.os_id = os_id if os_id is not None else detect_os()
        self.logger = run_logger if run_logger is not None else RunLogger()
        self.usage = usage_tracker if usage_tracker is not None else UsageTracker()
        self._client: LLMClient | None = None
        self._llm_config: LLMConfig | None = None

    @property
    def llm_enabled(self) -> bool:
        """Return whether translation may touch the network at all."""

        return self.features.enable_llm and not self.features.offline_mode

    @property
    def client(self) -> LLMClient | None:
        """Return the provider client if it has been constructed."""

        return self._client

    def translate(self, user_input: str) -> TranslationOutcome:
        """Run one translation turn for a raw input line."""

        if not self.llm_enabled:
            self.logger.log_event("translate", "skipped", reason="llm_disabled")
            return TranslationOutcome(TranslationState.NOT_TRANSLATED)

        if not is_natural_language(user_input):
            return TranslationOutcome(TranslationState.NOT_TRANSLATED)

        self.logger.log_stage_start("translate", os=self.os_id)
        try:
            outcome = self._dispatch(user_input)
        except ShellwrightError as exc:
            return self._handle_failure(exc)
        self.logger.log_stage_complete("translate", cache_hit=outcome.cache_hit)
        return outcome

    def _dispatch(self, user_input: str) -> TranslationOutcome:
        """Build the request and resolve it through the cache or the provider."""

        client, llm_config = self._ensure_client()
        request = TranslationRequest(
            prompt=self.prompts.build_prompt(user_input, self.os_id),
            max_tokens=llm_config.max_tokens,
            temperature=llm_config.temperature,
        )
        try:
            response = client.generate(request)
        except ProviderError as exc:
            self._log_provider_failure(client, exc)
            raise

        if client.last_cache_hit:
            self.usage.add_cache_hit()
            self.logger.log_event("cache", "hit", size=client.cache_size())
        else:
            if client.cache is not None:
                self.logger.log_event("cache", "miss", size=client.cache_size())
            self.usage.add_provider_call(response.usage)
            self.logger.log_event(
                "provider",
                "call",
                provider=client.provider_name(),
                finish_reason=response.finish_reason,
            )

        command = clean_model_output(response.content)
        if not command:
            raise ParseError(
                f"{client.provider_name()} returned an empty command.",
                provider=client.provider_name(),
                failure_kind="parse",
            )
        return TranslationOutcome(
            TranslationState.TRANSLATED,
            command=command,
            cache_hit=client.last_cache_hit,
            usage=response.usage,
        )

    def _ensure_client(self) -> tuple[LLMClient, LLMConfig]:
        """Construct the provider client once, on the first translated turn."""

        if self._client is None or self._llm_config is None:
            llm_config = self._llm_config_resolver()
            factory = self._client_factory or ProviderFactory.create_client
            self._client = factory(llm_config)
            self._llm_config = llm_config
        return self._client, self._llm_config

    def _log_provider_failure(self, client: LLMClient, exc: ProviderError) -> None:
        """Emit a provider-stage failure event without payload details."""

        context: dict[str, object] = {
            "provider": client.provider_name(),
            "failure_kind": exc.failure_kind,
        }
        if exc.status_code is not None:
            context["status_code"] = exc.status_code
        self.logger.log_event("provider", "failure", error_type=type(exc).__name__, **context)

    def _handle_failure(self, exc: ShellwrightError) -> TranslationOutcome:
        """Propagate or downgrade a failure according to the fallback flag."""

        context: dict[str, object] = {}
        status_code = getattr(exc, "status_code", None)
        if status_code is not None:
            context["status_code"] = status_code
        failure_kind = getattr(exc, "failure_kind", None)
        if failure_kind is not None:
            context["failure_kind"] = failure_kind

        if not self.features.fallback_to_traditional:
            self.logger.log_stage_failure("translate", type(exc).__name__, **context)
            raise exc

        self.logger.log_fallback("translate", type(exc).__name__, **context)
        return TranslationOutcome(TranslationState.PROVIDER_FAILED, error=exc)

    def clear_cache(self) -> None:
        """Drop cached responses, if a client exists."""

        if self._client is not None:
            self._client.clear_cache()

    def cache_size(self) -> int:
        """Return cached response count, zero before the first call."""

        if self._client is None:
            return 0
        return self._client.cache_size()
