"""Safety gate for translated commands.

Responsibilities:
- Classify a candidate command as dangerous, needing confirmation, or safe.
- Map the classification onto the action the caller must take under policy.

Matching is case-insensitive and consults only the two configured pattern
lists plus the confirm-destructive switch. The gate never executes anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


DEFAULT_REQUIRE_CONFIRMATION: tuple[str, ...] = ("rm", "delete", "format", "sudo", "rmdir")
DEFAULT_DANGEROUS_PATTERNS: tuple[str, ...] = ("rm -rf /", "format c:", "sudo rm", "del /s")


class SafetyVerdict(Enum):
    """Classification of a candidate command."""

    SAFE = "safe"
    DANGEROUS = "dangerous"
    NEEDS_CONFIRMATION = "needs_confirmation"


class SafetyAction(Enum):
    """What the caller must do before running a command."""

    PROCEED = "proceed"
    CONFIRM = "confirm"
    WARN = "warn"
    WARN_AND_CONFIRM = "warn_and_confirm"
    BLOCK = "block"


@dataclass(frozen=True, slots=True)
class SafetyPolicy:
    """Read-only safety settings loaded once per process.

    Attributes:
        require_confirmation: Ordered command prefixes that need a yes/no answer.
        dangerous_patterns: Ordered substrings that mark a command dangerous.
        enable_dry_run: Show commands instead of running them unless asked.
        block_destructive: Refuse dangerous commands outright.
    """

    require_confirmation: tuple[str, ...] = DEFAULT_REQUIRE_CONFIRMATION
    dangerous_patterns: tuple[str, ...] = DEFAULT_DANGEROUS_PATTERNS
    enable_dry_run: bool = True
    block_destructive: bool = False


@dataclass(frozen=True, slots=True)
class SafetyDecision:
    """Verdict, required action, and the pattern that triggered it."""

    command: str
    verdict: SafetyVerdict
    action: SafetyAction
    matched_pattern: str | None = None
    matched_prefix: str | None = None

    @property
    def allowed(self) -> bool:
        """Return whether the command may run at all."""

        return self.action is not SafetyAction.BLOCK

    @property
    def needs_confirmation(self) -> bool:
        """Return whether an affirmative user answer is required."""

        return self.action in {SafetyAction.CONFIRM, SafetyAction.WARN_AND_CONFIRM}

    @property
    def warning(self) -> str | None:
        """Return the warning text for dangerous commands."""

        if self.matched_pattern is None:
            return None
        if self.action is SafetyAction.BLOCK:
            return (
                f"Blocked: `{self.command}` matches dangerous pattern "
                f"`{self.matched_pattern}`."
            )
        return (
            f"Warning: `{self.command}` matches dangerous pattern "
            f"`{self.matched_pattern}`."
        )


class SafetyGate:
    """Pure classifier over a `SafetyPolicy` and the confirm-destructive switch."""

    def __init__(self, policy: SafetyPolicy, confirm_destructive: bool = True) -> None:
        """Initialize gate and precompute lowercased patterns and prefixes."""

        self.policy = policy
        self.confirm_destructive = confirm_destructive
        self._dangerous = tuple(pattern.lower() for pattern in policy.dangerous_patterns)
        self._prefixes = tuple(prefix.lower() for prefix in policy.require_confirmation)

    def matched_dangerous_pattern(self, command: str) -> str | None:
        """Return the first configured dangerous pattern contained in the command."""

        lowered = command.lower()
        for original, pattern in zip(self.policy.dangerous_patterns, self._dangerous):
            if pattern in lowered:
                return original
        return None

    def matched_confirmation_prefix(self, command: str) -> str | None:
        """Return the first confirmation prefix the command starts with."""

        if not self.confirm_destructive:
            return None
        lowered = command.lower()
        for original, prefix in zip(self.policy.require_confirmation, self._prefixes):
            if lowered.startswith(prefix):
                return original
        return None

    def is_dangerous(self, command: str) -> bool:
        """Return whether the command contains any dangerous pattern."""

        return self.matched_dangerous_pattern(command) is not None

    def requires_confirmation(self, command: str) -> bool:
        """Return whether the command starts with a confirmation prefix."""

        return self.matched_confirmation_prefix(command) is not None

    def evaluate(self, command: str) -> SafetyVerdict:
        """Classify a command; dangerous takes precedence over confirmation."""

        if self.is_dangerous(command):
            return SafetyVerdict.DANGEROUS
        if self.requires_confirmation(command):
            return SafetyVerdict.NEEDS_CONFIRMATION
        return SafetyVerdict.SAFE

    def decide(self, command: str) -> SafetyDecision:
        """Return the verdict together with the action required under policy."""

        pattern = self.matched_dangerous_pattern(command)
        prefix = self.matched_confirmation_prefix(command)

        if pattern is not None:
            if self.policy.block_destructive:
                action = SafetyAction.BLOCK
            elif prefix is not None:
                action = SafetyAction.WARN_AND_CONFIRM
            else:
                action = SafetyAction.WARN
            verdict = SafetyVerdict.DANGEROUS
        elif prefix is not None:
            action = SafetyAction.CONFIRM
            verdict = SafetyVerdict.NEEDS_CONFIRMATION
        else:
            action = SafetyAction.PROCEED
            verdict = SafetyVerdict.SAFE

        return SafetyDecision(
            command=command,
            verdict=verdict,
            action=action,
            matched_pattern=pattern,
            matched_prefix=prefix,
        )


def validate_confirmation(response: str) -> bool:
    """Return whether a user answer is an explicit yes."""

    return response.strip().lower() in {"y", "yes"}
