"""Top-level package for shellwright.

This package translates natural-language requests into shell commands through
a pluggable LLM provider, with a response cache and a safety gate in front of
execution. The main orchestration entry point is `TranslationService`.
"""

from .safety import SafetyGate
from .translation import TranslationService

__all__ = ["SafetyGate", "TranslationService", "__version__"]

__version__ = "0.1.0"
