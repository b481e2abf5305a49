"""
In-memory store adapter - Implements KeyValueStore protocol.

Single-process only; state is lost on restart. Used for development
and tests. Expired entries are dropped on read, and writes sweep every
expired entry at most once per sweep interval so keys that are never
read again do not accumulate.
"""

import time
from collections.abc import Callable


class InMemoryKeyValueStore:
    """
    Implements KeyValueStore protocol with a dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self, clock: Callable[[], float] = time.time, sweep_interval_seconds: float = 60.0
    ) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval_seconds
        self._entries: dict[str, tuple[str, float]] = {}
        self._last_sweep = clock()

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        if now - self._last_sweep >= self._sweep_interval:
            self.sweep_expired()
        self._entries[key] = (value, now + ttl_seconds)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def sweep_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
