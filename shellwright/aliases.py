"""Alias storage for the interactive shell.

Aliases map a leading command name to replacement text; expansion happens
before translation, so the core only ever sees expanded input.
"""

from __future__ import annotations

import json
from pathlib import Path


class AliasStore:
    """JSON-backed name to replacement-text mapping."""

    def __init__(self, path: Path) -> None:
        """Initialize an empty store backed by a JSON file."""

        self.path = path
        self._aliases: dict[str, str] = {}

    def load(self) -> None:
        """Load aliases from disk; a missing file means no aliases."""

        if not self.path.exists():
            self._aliases = {}
            return
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Alias file `{self.path}` must contain a JSON object.")
        self._aliases = {str(name): str(value) for name, value in payload.items()}

    def save(self) -> None:
        """Persist aliases as pretty-printed JSON."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self._aliases, indent=2, sort_keys=True),
            encoding="utf-8",
        )

    def add(self, name: str, replacement: str) -> None:
        """Add or replace an alias and persist the store."""

        normalized_name = name.strip()
        if not normalized_name or any(character.isspace() for character in normalized_name):
            raise ValueError("Alias name must be a single non-empty word.")
        if not replacement.strip():
            raise ValueError("Alias replacement must be non-empty.")
        self._aliases[normalized_name] = replacement.strip()
        self.save()

    def remove(self, name: str) -> bool:
        """Remove an alias and report whether it existed."""

        if name not in self._aliases:
            return False
        del self._aliases[name]
        self.save()
        return True

    def get(self, name: str) -> str | None:
        """Return the replacement text for an alias, if defined."""

        return self._aliases.get(name)

    def items(self) -> list[tuple[str, str]]:
        """Return aliases sorted by name."""

        return sorted(self._aliases.items())

    def expand(self, argv: list[str]) -> list[str]:
        """Expand the first token if it names an alias."""

        if not argv:
            return []
        replacement = self._aliases.get(argv[0])
        if replacement is None:
            return list(argv)
        return [*replacement.split(), *argv[1:]]
