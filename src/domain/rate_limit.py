"""
Rate limiting on top of the key-value store.

Two mechanisms guard the gate:

- Windowed attempt counters (passphrase guesses). The window end is fixed
  when the counter is created, so a steady stream of attempts cannot keep
  a counter alive past its window.
- Cooldown markers (SMS dispatch). The caller records the event only after
  the guarded action succeeded.

Identity is the client IP, which is weak (shared NAT, proxies) but the only
signal available before verification.
"""

import json
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from .ports import KeyValueStore


def passphrase_scope(client_ip: str) -> str:
    return f"rl:pw:{client_ip}"


def dispatch_scope(client_ip: str) -> str:
    return f"rl:sms:{client_ip}"


@dataclass
class RateLimiter:
    """Counters and cooldowns scoped by caller-supplied keys."""

    store: KeyValueStore
    clock: Callable[[], float] = time.time

    async def bump_and_check(self, scope_key: str, window_seconds: int) -> int:
        """
        Increment the counter for scope_key and return the new count.

        Callers reject the request when the count exceeds their cap.
        """
        now = self.clock()
        count, reset_at = self._parse_counter(await self.store.get(scope_key))

        if count == 0 or reset_at <= now:
            count, reset_at = 0, now + window_seconds

        count += 1
        ttl = max(1, math.ceil(reset_at - now))
        await self.store.put(scope_key, json.dumps({"count": count, "reset_at": reset_at}), ttl)
        return count

    async def check_cooldown(self, scope_key: str, cooldown_seconds: int) -> bool:
        """Return True when no event was recorded within the cooldown."""
        raw = await self.store.get(scope_key)
        if raw is None:
            return True
        try:
            last_ms = int(raw)
        except ValueError:
            return True
        return self._now_ms() - last_ms >= cooldown_seconds * 1000

    async def record_event(self, scope_key: str, ttl_seconds: int) -> None:
        """Write the current time as the last event for scope_key."""
        await self.store.put(scope_key, str(self._now_ms()), ttl_seconds)

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    @staticmethod
    def _parse_counter(raw: str | None) -> tuple[int, float]:
        # Anything unreadable restarts the window
        if raw is None:
            return 0, 0.0
        try:
            data = json.loads(raw)
            return int(data["count"]), float(data["reset_at"])
        except (ValueError, TypeError, KeyError):
            return 0, 0.0
