"""Owned time-to-live cache keyed per sandbox.

Entries are only ever replaced wholesale, so concurrent readers on the event
loop always see either the old or the new value, never a partial one.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class _Entry(Generic[V]):
    value: V
    stored_at: float


class TTLCache(Generic[K, V]):
    """Per-key cache whose entries expire ``ttl_sec`` after they were stored.

    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl_sec: float, *, clock: Clock | None = None) -> None:
        self._ttl_sec = ttl_sec
        self._clock = clock or time.monotonic
        self._entries: dict[K, _Entry[V]] = {}

    @property
    def ttl_sec(self) -> float:
        return self._ttl_sec

    def get(self, key: K) -> V | None:
        """Return the cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def put(self, key: K, value: V) -> None:
        """Store a value and sweep entries that have already expired."""
        now = self._clock()
        for stale in [k for k, e in self._entries.items() if self._expired(e, now)]:
            del self._entries[stale]
        self._entries[key] = _Entry(value=value, stored_at=now)

    def invalidate(self, key: K | None = None) -> None:
        """Drop one entry, or every entry when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        """Number of live entries."""
        now = self._clock()
        return sum(1 for e in self._entries.values() if not self._expired(e, now))

    def _expired(self, entry: _Entry[V], now: float) -> bool:
        return now - entry.stored_at >= self._ttl_sec
