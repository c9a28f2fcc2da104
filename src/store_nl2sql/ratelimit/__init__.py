"""Per-store request throttling."""

from __future__ import annotations

from .limiter import RateLimitDecision, RateLimiter
from .stores import CounterStore, InMemoryCounterStore, RedisCounterStore

__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "RateLimitDecision",
    "RateLimiter",
    "RedisCounterStore",
]
