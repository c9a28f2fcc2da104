"""Configuration service for store-nl2sql.

Centralizes environment variable handling, database engine creation and the
Redis client used by the rate limiter.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

import redis.asyncio as aioredis
import sqlalchemy as sa

DEFAULT_LLM_MODEL = "openai:gpt-4o"
POOL_SIZE = 5


@dataclass(frozen=True, slots=True)
class LLMConfig:
    """Settings for the AI completion client."""

    model: str = DEFAULT_LLM_MODEL
    temperature: float = 0.0
    max_tokens: int = 1024
    timeout_seconds: float = 30.0


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """Per-store admission window."""

    max_requests: int = 20
    window_seconds: int = 60


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    val = os.getenv(name, str(default))
    try:
        n = int(val)
    except ValueError:
        n = default
    return max(minimum, n)


class ConfigService:
    """Service for managing configuration and connections."""

    @staticmethod
    def get_readonly_database_url() -> str:
        """Get the read-only database URL from the environment.

        Raises:
            ValueError: If STORE_NL2SQL_READONLY_DATABASE_URL is not set
        """
        database_url = os.getenv("STORE_NL2SQL_READONLY_DATABASE_URL")
        if not database_url:
            error_msg = "STORE_NL2SQL_READONLY_DATABASE_URL environment variable not set"
            raise ValueError(error_msg)
        return database_url

    @staticmethod
    def get_redis_url() -> str | None:
        """Redis URL for rate-limit counters, or None for in-process counters."""
        url = os.getenv("STORE_NL2SQL_REDIS_URL", "").strip()
        return url or None

    @staticmethod
    def statement_timeout_ms() -> int:
        """Database-side statement timeout for model-generated SQL."""
        return _int_env("STORE_NL2SQL_STATEMENT_TIMEOUT_MS", 5000)

    @staticmethod
    def result_row_limit() -> int:
        """Maximum number of rows the executor returns."""
        return _int_env("STORE_NL2SQL_ROW_LIMIT", 1000)

    @staticmethod
    def create_readonly_engine(url: str, statement_timeout_ms: int | None = None) -> sa.Engine:
        """Create the engine used for all pipeline reads.

        The credentials in `url` should belong to a SELECT-only database user.
        On PostgreSQL every pooled connection additionally gets a statement
        timeout and a read-only default transaction mode.
        """
        timeout = statement_timeout_ms or ConfigService.statement_timeout_ms()
        create_kwargs: dict[str, object] = {"pool_pre_ping": True}
        if not url.startswith("sqlite"):
            create_kwargs["pool_size"] = POOL_SIZE

        engine = sa.create_engine(url, **create_kwargs)

        if engine.dialect.name == "postgresql":

            def _on_connect(dbapi_conn: Any, _record: object) -> None:
                # Session settings only survive if applied outside a transaction
                existing_autocommit = dbapi_conn.autocommit
                dbapi_conn.autocommit = True
                cursor = dbapi_conn.cursor()
                try:
                    cursor.execute(f"SET statement_timeout = {int(timeout)}")
                    cursor.execute("SET SESSION CHARACTERISTICS AS TRANSACTION READ ONLY")
                finally:
                    cursor.close()
                    dbapi_conn.autocommit = existing_autocommit

            sa.event.listen(engine, "connect", _on_connect, insert=True)

        return engine

    # ---- LLM configuration -----------------------------------------------
    @staticmethod
    def get_llm_config() -> LLMConfig:
        model = os.getenv("STORE_NL2SQL_LLM_MODEL", DEFAULT_LLM_MODEL).strip() or DEFAULT_LLM_MODEL
        return LLMConfig(
            model=model,
            timeout_seconds=float(_int_env("STORE_NL2SQL_LLM_TIMEOUT", 30)),
        )

    # ---- Rate limiting ---------------------------------------------------
    @staticmethod
    def get_rate_limit_config() -> RateLimitConfig:
        return RateLimitConfig(
            max_requests=_int_env("STORE_NL2SQL_RATE_LIMIT_MAX", 20),
            window_seconds=_int_env("STORE_NL2SQL_RATE_LIMIT_WINDOW", 60),
        )

    @staticmethod
    def create_redis_client(url: str) -> aioredis.Redis:
        """Create the asyncio Redis client for shared counters."""
        return aioredis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=2.0,
            socket_connect_timeout=2.0,
        )
