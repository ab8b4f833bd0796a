"""Configuration model and loaders for shellwright.

Responsibilities:
- Define the settings structure as typed dataclasses (`llm`, `safety`,
  `features`, `ui` sections).
- Load and validate YAML configuration, writing defaults on first run.
- Resolve provider runtime values with deterministic source precedence.

Key types:
- `ShellwrightConfig`: validated settings for one process.
- `LLMConfig`: resolved provider/model/key values used to build a client.
- `RuntimeConfigSources`: CLI, secure-storage, and environment value sources.
- `ConfigLoader`: YAML construction and persistence helpers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigurationError
from .llm.cache import DEFAULT_CACHE_CAPACITY
from .llm.http_client import DEFAULT_TIMEOUT_SECONDS
from .models.datatypes import ProviderIdentity, ProviderKind
from .parsing import normalize_optional_string, parse_permissive_boolean, parse_string_list
from .safety import DEFAULT_DANGEROUS_PATTERNS, DEFAULT_REQUIRE_CONFIRMATION, SafetyPolicy


_DEFAULT_MODEL = "gpt-3.5-turbo"
_DEFAULT_API_KEY_ENV = {
    ProviderKind.OPENAI: "OPENAI_API_KEY",
    ProviderKind.ANTHROPIC: "ANTHROPIC_API_KEY",
}


def default_config_dir() -> Path:
    """Return the per-user configuration directory."""

    return Path.home() / ".shellwright"


def default_config_path() -> Path:
    """Return the default YAML configuration path."""

    return default_config_dir() / "config.yaml"


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LLMConfig:
    """Resolved provider settings for one client construction.

    Attributes:
        provider: Selected provider identity.
        model: Model identifier, also part of every cache fingerprint.
        api_key: Resolved API key, never persisted.
        endpoint: Optional endpoint override.
        timeout_seconds: Per-call timeout.
        max_tokens: Completion token budget per request.
        temperature: Sampling temperature.
        enable_cache: Whether responses are cached in-process.
        cache_capacity: Maximum cached responses.
    """

    provider: ProviderIdentity
    model: str
    api_key: str | None = None
    endpoint: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_tokens: int = 150
    temperature: float = 0.1
    enable_cache: bool = True
    cache_capacity: int = DEFAULT_CACHE_CAPACITY


@dataclass(slots=True)
class LLMSettings:
    """The `llm` configuration section.

    `api_key` is a literal key; `api_key_env` names an environment variable.
    Leaving `api_key_env` unset uses the provider's conventional variable.
    """

    provider: str = "openai"
    model: str = _DEFAULT_MODEL
    api_key: str | None = None
    api_key_env: str | None = None
    endpoint: str | None = None
    timeout_seconds: int = 30
    max_tokens: int = 150
    temperature: float = 0.1
    enable_cache: bool = True
    cache_capacity: int = DEFAULT_CACHE_CAPACITY


@dataclass(slots=True)
class SafetySettings:
    """The `safety` configuration section."""

    require_confirmation: tuple[str, ...] = DEFAULT_REQUIRE_CONFIRMATION
    dangerous_patterns: tuple[str, ...] = DEFAULT_DANGEROUS_PATTERNS
    enable_dry_run: bool = True
    block_destructive: bool = False


@dataclass(slots=True)
class FeatureSettings:
    """The `features` configuration section."""

    enable_llm: bool = True
    fallback_to_traditional: bool = True
    offline_mode: bool = False
    enable_history: bool = True


@dataclass(slots=True)
class UISettings:
    """The `ui` configuration section."""

    show_hints: bool = True
    colored_output: bool = True
    verbose_mode: bool = False
    confirm_destructive: bool = True


@dataclass(slots=True)
class ShellwrightConfig:
    """Validated settings for one shellwright process."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    safety: SafetySettings = field(default_factory=SafetySettings)
    features: FeatureSettings = field(default_factory=FeatureSettings)
    ui: UISettings = field(default_factory=UISettings)

    def validate(self) -> None:
        """Validate configuration values before use."""

        try:
            ProviderIdentity.parse(self.llm.provider or "")
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if normalize_optional_string(self.llm.model) is None:
            raise ConfigurationError("`llm.model` must be a non-empty string.")
        for name in ("timeout_seconds", "max_tokens", "cache_capacity"):
            value = getattr(self.llm, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"`llm.{name}` must be a positive integer.")
        if not 0.0 <= float(self.llm.temperature) <= 2.0:
            raise ConfigurationError("`llm.temperature` must be within [0, 2].")

    def safety_policy(self) -> SafetyPolicy:
        """Return the read-only safety policy for the Safety Gate."""

        return SafetyPolicy(
            require_confirmation=tuple(self.safety.require_confirmation),
            dangerous_patterns=tuple(self.safety.dangerous_patterns),
            enable_dry_run=self.safety.enable_dry_run,
            block_destructive=self.safety.block_destructive,
        )

    def resolved_llm_config(self, sources: RuntimeConfigSources | None = None) -> LLMConfig:
        """Resolve provider settings with deterministic source precedence.

        Provider, model, and endpoint: `cli` > config field.
        API key: `cli` > `llm.api_key` > `secure` > `env[api_key_env]` >
        the provider's conventional environment variable.
        """

        resolved_sources = sources if sources is not None else RuntimeConfigSources()

        provider_token = (
            self._normalized_lookup(resolved_sources.cli, "provider") or self.llm.provider or ""
        )
        try:
            provider = ProviderIdentity.parse(provider_token)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        model = self._normalized_lookup(resolved_sources.cli, "model") or self.llm.model
        if normalize_optional_string(model) is None:
            raise ConfigurationError("`llm.model` must be a non-empty string.")

        endpoint = self._normalized_lookup(
            resolved_sources.cli, "endpoint"
        ) or normalize_optional_string(self.llm.endpoint)

        return LLMConfig(
            provider=provider,
            model=model.strip(),
            api_key=self._resolve_api_key(provider, resolved_sources),
            endpoint=endpoint,
            timeout_seconds=float(self.llm.timeout_seconds),
            max_tokens=self.llm.max_tokens,
            temperature=float(self.llm.temperature),
            enable_cache=self.llm.enable_cache,
            cache_capacity=self.llm.cache_capacity,
        )

    def api_key_env_name(self, provider: ProviderIdentity) -> str | None:
        """Return the environment variable consulted for the provider's API key."""

        configured = normalize_optional_string(self.llm.api_key_env)
        if configured is not None:
            return configured
        return _DEFAULT_API_KEY_ENV.get(provider.kind)

    def _resolve_api_key(
        self, provider: ProviderIdentity, sources: RuntimeConfigSources
    ) -> str | None:
        """Resolve the API key from sources in deterministic precedence order."""

        cli_value = self._normalized_lookup(sources.cli, "api_key")
        if cli_value is not None:
            return cli_value

        literal_value = normalize_optional_string(self.llm.api_key)
        if literal_value is not None:
            return literal_value

        secure_value = self._normalized_lookup(sources.secure, "api_key")
        if secure_value is not None:
            return secure_value

        for env_name in (self.api_key_env_name(provider), _DEFAULT_API_KEY_ENV.get(provider.kind)):
            if env_name is None:
                continue
            env_value = self._normalized_lookup(sources.env, env_name)
            if env_value is not None:
                return env_value
        return None

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    def as_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        """Return a plain mapping suitable for YAML serialization."""

        payload = asdict(self)
        payload["safety"]["require_confirmation"] = list(self.safety.require_confirmation)
        payload["safety"]["dangerous_patterns"] = list(self.safety.dangerous_patterns)
        if not include_secrets:
            payload["llm"].pop("api_key", None)
        return payload


class ConfigLoader:
    """Factory methods for creating and persisting `ShellwrightConfig`."""

    _SECTION_TYPES: dict[str, type] = {
        "llm": LLMSettings,
        "safety": SafetySettings,
        "features": FeatureSettings,
        "ui": UISettings,
    }

    @staticmethod
    def load(path: Path | None = None) -> ShellwrightConfig:
        """Load config from YAML, writing defaults when the file does not exist."""

        config_path = path if path is not None else default_config_path()
        if config_path.exists():
            return ConfigLoader.from_yaml(config_path)

        config = ShellwrightConfig()
        ConfigLoader.save(config, config_path)
        return config

    @staticmethod
    def from_yaml(path: Path) -> ShellwrightConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(path_text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"YAML config `{path}` must contain a top-level mapping.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any], source_label: str = "config"
    ) -> ShellwrightConfig:
        """Build a validated config from a nested mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SECTION_TYPES))
        if unknown:
            raise ConfigurationError(
                f"{source_label} includes unsupported section(s): {', '.join(unknown)}."
            )

        sections: dict[str, Any] = {}
        for section_name, section_type in ConfigLoader._SECTION_TYPES.items():
            section_payload = payload.get(section_name) or {}
            if not isinstance(section_payload, Mapping):
                raise ConfigurationError(
                    f"{source_label} section `{section_name}` must be a mapping."
                )
            sections[section_name] = ConfigLoader._build_section(
                section_type, section_payload, f"{source_label} section `{section_name}`"
            )

        config = ShellwrightConfig(**sections)
        config.validate()
        return config

    @staticmethod
    def save(config: ShellwrightConfig, path: Path | None = None) -> Path:
        """Write config as YAML without any literal API key."""

        config_path = path if path is not None else default_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(
            yaml.safe_dump(config.as_dict(), sort_keys=False),
            encoding="utf-8",
        )
        return config_path

    @staticmethod
    def _build_section(section_type: type, payload: Mapping[str, Any], source_label: str) -> Any:
        """Build one settings dataclass, coercing values against its defaults."""

        defaults = section_type()
        supported = set(section_type.__dataclass_fields__)
        unknown = sorted(set(payload).difference(supported))
        if unknown:
            raise ConfigurationError(
                f"{source_label} includes unsupported key(s): {', '.join(unknown)}."
            )

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            default_value = getattr(defaults, key)
            values[key] = ConfigLoader._coerce_value(key, raw_value, default_value, source_label)
        return section_type(**values)

    @staticmethod
    def _coerce_value(key: str, raw_value: Any, default_value: Any, source_label: str) -> Any:
        """Coerce one raw YAML value to the type of its default."""

        if isinstance(default_value, bool):
            parsed = parse_permissive_boolean(raw_value)
            if parsed is None:
                raise ConfigurationError(
                    f"{source_label} field `{key}` must be a boolean value "
                    "(`true`/`false`, `1`/`0`, `yes`/`no`)."
                )
            return parsed
        if isinstance(default_value, int):
            return ConfigLoader._parse_positive_int(key, raw_value, source_label)
        if isinstance(default_value, float):
            return ConfigLoader._parse_float(key, raw_value, source_label)
        if isinstance(default_value, tuple):
            try:
                return parse_string_list(raw_value, key)
            except ValueError as exc:
                raise ConfigurationError(f"{source_label}: {exc}") from exc
        return normalize_optional_string(raw_value)

    @staticmethod
    def _parse_positive_int(key: str, raw_value: Any, source_label: str) -> int:
        """Read and validate a positive integer field."""

        if isinstance(raw_value, bool):
            raise ConfigurationError(f"{source_label} field `{key}` must be a positive integer.")
        try:
            parsed = int(str(raw_value).strip())
        except ValueError as exc:
            raise ConfigurationError(
                f"{source_label} field `{key}` must be a positive integer."
            ) from exc
        if parsed <= 0:
            raise ConfigurationError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _parse_float(key: str, raw_value: Any, source_label: str) -> float:
        """Read a numeric field as float."""

        if isinstance(raw_value, bool):
            raise ConfigurationError(f"{source_label} field `{key}` must be a number.")
        try:
            return float(str(raw_value).strip())
        except ValueError as exc:
            raise ConfigurationError(f"{source_label} field `{key}` must be a number.") from exc
