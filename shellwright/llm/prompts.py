"""Prompt template for command translation.

Responsibilities:
- Render a natural-language request plus OS context into one model prompt.
- Keep section order and headers stable; models are sensitive to them.
- Detect the host OS identifier used to pick the OS label.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import platform
from types import MappingProxyType
from typing import Mapping


UNKNOWN_OS_LABEL = "Unknown OS"

_DEFAULT_SYSTEM_PROMPT = """You are a cross-platform command translator. Your job is to convert natural language requests into appropriate shell commands for the target operating system.

Key responsibilities:
1. Translate natural language to OS-specific commands
2. Ensure commands are safe and appropriate
3. Handle cross-platform differences (Windows vs Unix)
4. Provide only the command, no explanations

Examples:
- "create a directory called test" → "mkdir test" (Unix) or "mkdir test" (Windows)
- "list files in current directory" → "ls -la" (Unix) or "dir" (Windows)
- "copy file.txt to backup.txt" → "cp file.txt backup.txt" (Unix) or "copy file.txt backup.txt" (Windows)
- "delete file.txt" → "rm file.txt" (Unix) or "del file.txt" (Windows)
- "show current directory" → "pwd" (Unix) or "cd" (Windows)

Always consider the target OS and provide the most appropriate command."""

_DEFAULT_OUTPUT_FORMAT = """Return ONLY the command without any explanations, quotes, or additional text.
For compound operations, separate commands with ' && '.
For Windows, use PowerShell commands when appropriate.
For Unix systems, use standard shell commands."""

_DEFAULT_OS_CONTEXT = {
    "windows": "Windows PowerShell/Command Prompt",
    "linux": "Linux bash/sh shell",
    "macos": "macOS bash/zsh shell",
}

_DEFAULT_SAFETY_RULES = (
    "Never suggest commands that could harm the system",
    "Always use safe file operations",
    "Warn about destructive operations",
    "Prefer native cross-platform commands when possible",
    "Only return the command, no explanations",
)


def _default_os_context() -> Mapping[str, str]:
    """Return a read-only copy of the default OS label mapping."""

    return MappingProxyType(dict(_DEFAULT_OS_CONTEXT))


@dataclass(frozen=True, slots=True)
class PromptTemplate:
    """Immutable prompt template shared for the process lifetime."""

    system_prompt: str = _DEFAULT_SYSTEM_PROMPT
    os_context: Mapping[str, str] = field(default_factory=_default_os_context)
    safety_rules: tuple[str, ...] = _DEFAULT_SAFETY_RULES
    output_format: str = _DEFAULT_OUTPUT_FORMAT

    def os_label(self, os_id: str) -> str:
        """Return the human-readable label for an OS identifier."""

        return self.os_context.get(os_id, UNKNOWN_OS_LABEL)

    def build_prompt(self, user_input: str, os_id: str) -> str:
        """Render the translation prompt for one request."""

        rules = "\n- ".join(self.safety_rules)
        return (
            f"{self.system_prompt}\n\n"
            f"Target OS: {self.os_label(os_id)}\n"
            f'User Request: "{user_input}"\n\n'
            f"Safety Rules:\n{rules}\n\n"
            f"Output Format:\n{self.output_format}\n\n"
            "Provide only the command:"
        )


def detect_os() -> str:
    """Return `windows`, `macos`, `linux`, or `unknown` for the host."""

    system = platform.system()
    if system == "Windows":
        return "windows"
    if system == "Darwin":
        return "macos"
    if system == "Linux":
        return "linux"
    return "unknown"
