"""Shared typed data models for shellwright.

This package contains dataclasses used across translation modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    ProviderIdentity,
    ProviderKind,
    TranslationRequest,
    TranslationResponse,
    Usage,
)

__all__ = [
    "ProviderIdentity",
    "ProviderKind",
    "TranslationRequest",
    "TranslationResponse",
    "Usage",
]
