"""Process-local response cache with time-based expiry."""

from __future__ import annotations

import hashlib
import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its expiry time and ETag."""

    data: Any
    expires_at: float
    etag: str


class HackathonCache:
    """Key/value cache with per-entry TTL and explicit invalidation.

    The clock is injected so that expiry can be driven deterministically
    in tests; it must return seconds as a float (``time.monotonic`` by
    default).
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """Initialize an empty cache."""
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def generate_etag(data: Any) -> str:
        """Build a quoted ETag from the JSON form of the data."""
        payload = json.dumps(data, sort_keys=True, default=str).encode("utf-8")
        return f'"{hashlib.sha1(payload).hexdigest()}"'  # nosec B324

    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for a key, dropping it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def set(self, key: str, value: Any, ttl: float) -> CacheEntry:
        """Store a value for ``ttl`` seconds and return the new entry."""
        entry = CacheEntry(
            data=value,
            expires_at=self._clock() + ttl,
            etag=self.generate_etag(value),
        )
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        """Remove a single key if present."""
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> None:
        """Remove every key starting with ``prefix``."""
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def cleanup(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now > e.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


def hackathon_cache_prefix(hackathon_id: str) -> str:
    """Prefix shared by every cached view of a hackathon."""
    return f"hackathon:{hackathon_id}:"


def winners_cache_key(hackathon_id: str) -> str:
    """Cache key for the public winners view of a hackathon."""
    return f"{hackathon_cache_prefix(hackathon_id)}winners"
