"""Bounded response cache for provider-backed translations.

Responsibilities:
- Build stable 64-bit fingerprints from the semantic request and model id.
- Keep at most `capacity` responses with strict least-recently-used eviction.
- Guard the LRU order with one lock so parallel callers see a consistent order.
- Track basic cache telemetry (hits/misses) for diagnostics.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from hashlib import sha256
import json
import threading

from ..models.datatypes import TranslationRequest, TranslationResponse


DEFAULT_CACHE_CAPACITY = 100


def fingerprint(request: TranslationRequest, model: str) -> int:
    """Return the 64-bit cache fingerprint for a request against a model.

    Temperature is rounded to two decimal digits so float noise does not
    cause misses.
    """

    identity = [
        request.prompt,
        request.max_tokens,
        round(request.temperature * 100),
        request.context,
        model,
    ]
    canonical = json.dumps(identity, ensure_ascii=True, separators=(",", ":"))
    digest = sha256(canonical.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


@dataclass(slots=True)
class ResponseCache:
    """Thread-safe LRU cache keyed by request fingerprint."""

    capacity: int = DEFAULT_CACHE_CAPACITY
    hits: int = 0
    misses: int = 0
    _entries: OrderedDict[int, TranslationResponse] = field(default_factory=OrderedDict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        """Validate cache capacity."""

        if isinstance(self.capacity, bool) or self.capacity <= 0:
            raise ValueError("`capacity` must be a positive integer.")

    def lookup(self, key: int) -> TranslationResponse | None:
        """Return a cached response and promote it to most-recently-used."""

        with self._lock:
            response = self._entries.get(key)
            if response is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return response

    def insert(self, key: int, response: TranslationResponse) -> None:
        """Store a response, evicting the least-recently-used entry when full.

        Concurrent misses for the same key resolve as last-write-wins.
        """

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)
            self._entries[key] = response

    def clear(self) -> None:
        """Drop every entry and reset telemetry counters."""

        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Membership check that does not touch recency order."""

        with self._lock:
            return key in self._entries
