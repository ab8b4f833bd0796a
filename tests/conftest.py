"""Shared pytest fixtures for the full shellwright test suite."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the home directory and provider key variables at test-local values."""

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    return home


@pytest.fixture(autouse=True)
def _block_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail loudly if a test reaches the real HTTP transport."""

    def _refuse_post(*args: object, **kwargs: object) -> None:
        """Raise for any unmocked provider request."""

        _ = args
        _ = kwargs
        raise AssertionError("unexpected network call in tests")

    monkeypatch.setattr("shellwright.llm.http_client.requests.post", _refuse_post)
