"""Per-store admission gate over a shared counter store.

Admission is charged on attempt: a request that is admitted and then fails
still counts against the window. When the counter store is unreachable the
limiter fails open: the request is admitted and the error is logged.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastmcp.utilities.logging import get_logger

from store_nl2sql.errors import CounterStoreError, RateLimitError
from store_nl2sql.ratelimit.stores import CounterStore

_logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "You've sent too many questions. Please wait a moment."


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of one admission check."""

    allowed: bool
    current: int
    limit: int
    retry_after_seconds: int | None = None


class RateLimiter:
    """Fixed-window limiter: `max_requests` per `window_seconds` per store."""

    def __init__(
        self, store: CounterStore, *, max_requests: int = 20, window_seconds: int = 60
    ) -> None:
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @staticmethod
    def key_for(store_id: str) -> str:
        return f"ratelimit:{store_id}:chat"

    async def try_admit(self, store_id: str) -> RateLimitDecision:
        """Count one request for `store_id` and decide whether to admit it."""
        try:
            current, ttl = await self.store.incr_window(self.key_for(store_id), self.window_seconds)
        except CounterStoreError as exc:
            _logger.error("Rate limiter counter store error, allowing request (store=%s): %s", store_id, exc)
            return RateLimitDecision(allowed=True, current=0, limit=self.max_requests)

        if current <= self.max_requests:
            return RateLimitDecision(allowed=True, current=current, limit=self.max_requests)

        retry_after = min(ttl, self.window_seconds) if ttl > 0 else self.window_seconds
        _logger.warning(
            "Rate limit exceeded (store=%s, current=%d, max=%d, retry_after=%d)",
            store_id,
            current,
            self.max_requests,
            retry_after,
        )
        return RateLimitDecision(
            allowed=False,
            current=current,
            limit=self.max_requests,
            retry_after_seconds=retry_after,
        )

    async def check_limit(self, store_id: str) -> None:
        """Admit the request or raise.

        Raises:
            RateLimitError: If the store is over quota for the current window
        """
        decision = await self.try_admit(store_id)
        if not decision.allowed:
            raise RateLimitError(
                RATE_LIMIT_MESSAGE,
                retry_after_seconds=decision.retry_after_seconds or self.window_seconds,
            )
