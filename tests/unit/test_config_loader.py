"""Unit tests for YAML configuration loading and runtime key resolution."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from shellwright.config import (
    ConfigLoader,
    LLMSettings,
    RuntimeConfigSources,
    ShellwrightConfig,
    default_config_path,
)
from shellwright.errors import ConfigurationError
from shellwright.models.datatypes import ProviderKind
from shellwright.safety import DEFAULT_DANGEROUS_PATTERNS, DEFAULT_REQUIRE_CONFIRMATION


def test_defaults_match_documented_values() -> None:
    """Default settings should mirror the documented configuration defaults."""

    config = ShellwrightConfig()

    assert config.llm.provider == "openai"
    assert config.llm.model == "gpt-3.5-turbo"
    assert config.llm.timeout_seconds == 30
    assert config.llm.max_tokens == 150
    assert config.llm.temperature == 0.1
    assert config.llm.cache_capacity == 100
    assert config.safety.require_confirmation == DEFAULT_REQUIRE_CONFIRMATION
    assert config.safety.dangerous_patterns == DEFAULT_DANGEROUS_PATTERNS
    assert config.safety.enable_dry_run is True
    assert config.safety.block_destructive is False
    assert config.features.fallback_to_traditional is True
    assert config.features.offline_mode is False
    assert config.ui.verbose_mode is False
    assert config.ui.confirm_destructive is True


def test_from_yaml_loads_and_normalizes_values(tmp_path: Path) -> None:
    """YAML loader should coerce typed values and keep list order."""

    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
llm:
  provider: " anthropic "
  model: " claude-3-haiku "
  api_key_env: " MY_KEY "
  max_tokens: "200"
  temperature: 0
  enable_cache: "no"
safety:
  require_confirmation: [" git push ", rm, rm]
  block_destructive: yes
features:
  offline_mode: "on"
ui:
  colored_output: false
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.llm.provider == "anthropic"
    assert config.llm.model == "claude-3-haiku"
    assert config.llm.api_key_env == "MY_KEY"
    assert config.llm.max_tokens == 200
    assert config.llm.temperature == 0.0
    assert config.llm.enable_cache is False
    assert config.safety.require_confirmation == ("git push", "rm")
    assert config.safety.dangerous_patterns == DEFAULT_DANGEROUS_PATTERNS
    assert config.safety.block_destructive is True
    assert config.features.offline_mode is True
    assert config.ui.colored_output is False

    policy = config.safety_policy()
    assert policy.require_confirmation == ("git push", "rm")
    assert policy.block_destructive is True


def test_from_yaml_empty_file_yields_defaults(tmp_path: Path) -> None:
    """An empty YAML document means "all defaults"."""

    config_path = tmp_path / "config.yaml"
    config_path.write_text("", encoding="utf-8")

    assert ConfigLoader.from_yaml(config_path) == ShellwrightConfig()


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ("llm: [1, 2]", "section `llm` must be a mapping"),
        ("plugins: {}", "unsupported section"),
        ("llm:\n  colour: red", "unsupported key"),
        ("llm:\n  provider: gemini", "Unknown LLM provider: gemini"),
        ("llm:\n  max_tokens: 0", "must be a positive integer"),
        ("llm:\n  temperature: 2.5", r"within \[0, 2\]"),
        ("llm:\n  temperature: warm", "must be a number"),
        ("ui:\n  verbose_mode: sometimes", "must be a boolean"),
        ("safety:\n  dangerous_patterns: rm", "must be a list of strings"),
        ("- just\n- a list", "top-level mapping"),
        ("llm: {provider: [", "not valid YAML"),
    ],
)
def test_from_yaml_rejects_invalid_payloads(tmp_path: Path, payload: str, message: str) -> None:
    """Invalid files should raise actionable configuration errors."""

    config_path = tmp_path / "config.yaml"
    config_path.write_text(payload, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=message):
        ConfigLoader.from_yaml(config_path)


def test_load_writes_defaults_on_first_run(tmp_path: Path) -> None:
    """A missing config file is created with defaults and no literal key."""

    config_path = tmp_path / "nested" / "config.yaml"

    config = ConfigLoader.load(config_path)

    assert config == ShellwrightConfig()
    assert config_path.exists()
    written = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    assert "api_key" not in written["llm"]
    assert written["safety"]["require_confirmation"] == list(DEFAULT_REQUIRE_CONFIRMATION)
    assert ConfigLoader.load(config_path) == config


def test_load_without_path_uses_home_directory(_isolated_home: Path) -> None:
    """The default location lives under the user's home directory."""

    ConfigLoader.load()

    assert default_config_path() == _isolated_home / ".shellwright" / "config.yaml"
    assert default_config_path().exists()


def test_save_never_persists_literal_api_key(tmp_path: Path) -> None:
    """Saving a config with a literal key must drop the key."""

    config = ShellwrightConfig(llm=LLMSettings(api_key="sk-secret-value"))

    path = ConfigLoader.save(config, tmp_path / "config.yaml")

    assert "sk-secret-value" not in path.read_text(encoding="utf-8")
    assert config.as_dict(include_secrets=True)["llm"]["api_key"] == "sk-secret-value"


def test_resolved_llm_config_api_key_precedence() -> None:
    """API key precedence is cli > literal > secure > env var > provider default env."""

    env = {"OPENAI_API_KEY": "env-default", "MY_KEY": "env-named"}
    config = ShellwrightConfig(
        llm=LLMSettings(api_key="literal", api_key_env="MY_KEY")
    )

    def _resolve(cli: dict[str, str], secure: dict[str, str]) -> str | None:
        """Resolve the key for one combination of sources."""

        return config.resolved_llm_config(
            RuntimeConfigSources(cli=cli, secure=secure, env=env)
        ).api_key

    assert _resolve({"api_key": "cli"}, {"api_key": "secure"}) == "cli"
    assert _resolve({}, {"api_key": "secure"}) == "literal"

    config.llm.api_key = None
    assert _resolve({}, {"api_key": "secure"}) == "secure"
    assert _resolve({}, {}) == "env-named"

    config.llm.api_key_env = "MISSING_KEY"
    assert _resolve({}, {}) == "env-default"

    assert config.resolved_llm_config(RuntimeConfigSources()).api_key is None


def test_resolved_llm_config_uses_provider_default_env_for_anthropic() -> None:
    """Without `api_key_env`, each provider reads its own conventional variable."""

    config = ShellwrightConfig(llm=LLMSettings(provider="anthropic"))
    env = {"OPENAI_API_KEY": "openai-key", "ANTHROPIC_API_KEY": "anthropic-key"}

    resolved = config.resolved_llm_config(RuntimeConfigSources(env=env))

    assert resolved.provider.kind is ProviderKind.ANTHROPIC
    assert resolved.api_key == "anthropic-key"


def test_resolved_llm_config_cli_overrides_provider_model_endpoint() -> None:
    """CLI values win over config for provider, model, and endpoint."""

    config = ShellwrightConfig(llm=LLMSettings(endpoint="http://config.local"))
    cli = {"provider": "anthropic", "model": " claude-x ", "endpoint": "http://cli.local"}

    resolved = config.resolved_llm_config(RuntimeConfigSources(cli=cli))

    assert resolved.provider.kind is ProviderKind.ANTHROPIC
    assert resolved.model == "claude-x"
    assert resolved.endpoint == "http://cli.local"
    assert resolved.timeout_seconds == 30.0
    assert resolved.max_tokens == 150


def test_resolved_llm_config_rejects_unknown_cli_provider() -> None:
    """Unknown providers from the CLI are configuration errors."""

    with pytest.raises(ConfigurationError, match="Unknown LLM provider"):
        ShellwrightConfig().resolved_llm_config(RuntimeConfigSources(cli={"provider": "nope"}))
