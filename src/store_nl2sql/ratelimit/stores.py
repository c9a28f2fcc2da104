"""Counter stores backing the per-store rate limiter.

A counter store exposes one operation, `incr_window`, which increments a
counter and ensures it has an expiry in one atomic step. A counter key never
exists without a TTL.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import math
import time
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from store_nl2sql.errors import CounterStoreError

# Increments KEYS[1] and (re)applies the window TTL when the key is new or has
# lost its expiry. Returns {count, ttl_seconds}.
INCR_WINDOW_SCRIPT = """
local current = redis.call('INCR', KEYS[1])
local ttl = redis.call('TTL', KEYS[1])
if current == 1 or ttl < 0 then
  redis.call('EXPIRE', KEYS[1], ARGV[1])
  ttl = tonumber(ARGV[1])
end
return {current, ttl}
"""


class CounterStore(Protocol):
    async def incr_window(self, key: str, window_seconds: int) -> tuple[int, int]:
        """Increment `key` and return `(count, ttl_seconds)`.

        Raises:
            CounterStoreError: If the backing store cannot be reached
        """
        ...


class RedisCounterStore:
    """Shared counters in Redis, updated by a single server-side Lua script."""

    def __init__(self, client: Redis) -> None:
        self.client = client
        self._script = client.register_script(INCR_WINDOW_SCRIPT)

    async def incr_window(self, key: str, window_seconds: int) -> tuple[int, int]:
        try:
            current, ttl = await self._script(keys=[key], args=[window_seconds])
        except (RedisError, OSError) as exc:
            msg = f"Redis counter store unavailable: {exc}"
            raise CounterStoreError(msg) from exc
        return int(current), int(ttl)

    async def close(self) -> None:
        await self.client.aclose()


class InMemoryCounterStore:
    """Process-local counters for single-instance deployments and tests.

    The lock makes increment-and-expire atomic within the event loop.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._counters: dict[str, tuple[int, float]] = {}

    async def incr_window(self, key: str, window_seconds: int) -> tuple[int, int]:
        async with self._lock:
            now = self._clock()
            count, expires_at = self._counters.get(key, (0, now))
            if expires_at <= now:
                count, expires_at = 0, now + window_seconds
            count += 1
            self._counters[key] = (count, expires_at)
            return count, max(0, math.ceil(expires_at - now))
