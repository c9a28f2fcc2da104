"""Exception hierarchy for the store question pipeline.

Every error raised across a stage boundary derives from `AppError`, which
carries an HTTP-like status code and a stable machine-readable code so the
calling layer can render a response without inspecting message text.

Error Categories:
- ValidationError: bad input shape (question, tenant key, unsafe SQL)
- RateLimitError: per-store quota exceeded
- AIError: unusable model output or failed query execution
- SchemaContextError: store metadata could not be read
- CounterStoreError: rate-limit backing store unreachable (internal only)
"""

from __future__ import annotations


class AppError(Exception):
    """Base exception for all pipeline operations."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, object]:
        """Return the error envelope sent to callers."""
        return {
            "success": False,
            "error": {"code": self.code, "message": self.message},
        }


class ValidationError(AppError):
    """Raised when input fails shape or safety checks.

    Covers empty or oversized questions, tenant keys that are not canonical
    UUIDs, and SQL rejected by the sandbox.
    """

    status_code = 400
    code = "VALIDATION_ERROR"


class UnsafeSqlError(ValidationError):
    """Raised when model-generated SQL fails sandbox or scope rules."""

    def __init__(self, message: str, violations: list[str]) -> None:
        super().__init__(message)
        self.violations = list(violations)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        error = payload["error"]
        if isinstance(error, dict):
            error["violations"] = list(self.violations)
        return payload


class RateLimitError(AppError):
    """Raised when a store has exceeded its request quota for the window."""

    status_code = 429
    code = "RATE_LIMIT_ERROR"

    def __init__(self, message: str, retry_after_seconds: int) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["retryAfter"] = self.retry_after_seconds
        return payload


class AIError(AppError):
    """Raised when the AI collaborator or query execution fails.

    Messages are written for the store owner. The underlying cause is chained
    and logged but never included in the message.
    """

    status_code = 502
    code = "AI_ERROR"


class QueryTimeoutError(AIError):
    """Raised when a query exceeds the database statement timeout."""

    code = "QUERY_TIMEOUT"


class QueryExecutionError(AIError):
    """Raised for execution failures other than timeouts."""


class SchemaContextError(AppError):
    """Raised when store metadata cannot be read from the database."""


class CounterStoreError(AppError):
    """Raised by counter stores when the backing store is unreachable.

    The rate limiter catches this and admits the request.
    """

    status_code = 503
    code = "COUNTER_STORE_UNAVAILABLE"
