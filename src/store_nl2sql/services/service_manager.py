"""Chat service manager for store-nl2sql.

Provides a singleton `ChatService` built lazily from environment
configuration and torn down during FastMCP lifespan shutdown.
"""

from __future__ import annotations

import asyncio
import hashlib
import threading
from typing import ClassVar

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa

from store_nl2sql.context import SchemaContextProvider
from store_nl2sql.execute import QueryExecutor
from store_nl2sql.llm import PydanticAICompletionClient
from store_nl2sql.pipeline import AIQueryPipeline, ChatService
from store_nl2sql.ratelimit import (
    CounterStore,
    InMemoryCounterStore,
    RateLimiter,
    RedisCounterStore,
)
from store_nl2sql.services.config_service import ConfigService


class ChatServiceManager:
    """Singleton owner of the engine, counter store and `ChatService`."""

    _instance: ClassVar[ChatServiceManager | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._chat_service: ChatService | None = None
        self._engine: sa.Engine | None = None
        self._counter_store: CounterStore | None = None
        self._initialization_lock = asyncio.Lock()
        self._logger = get_logger(__name__)

    @classmethod
    def get_instance(cls) -> ChatServiceManager:
        """Get the singleton instance of ChatServiceManager."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        with cls._lock:
            cls._instance = None

    async def get_chat_service(self) -> ChatService:
        """Return the chat service, building it on first use.

        Raises:
            ValueError: If the read-only database URL is not configured
        """
        if self._chat_service is not None:
            return self._chat_service
        async with self._initialization_lock:
            if self._chat_service is None:
                self._chat_service = await asyncio.to_thread(self._build)
        return self._chat_service

    def install(
        self,
        chat_service: ChatService,
        *,
        engine: sa.Engine | None = None,
        counter_store: CounterStore | None = None,
    ) -> None:
        """Use a pre-built chat service instead of one built from the environment."""
        self._chat_service = chat_service
        self._engine = engine
        self._counter_store = counter_store

    @property
    def is_initialized(self) -> bool:
        return self._chat_service is not None

    def _build(self) -> ChatService:
        self._logger.info("Building ChatService…")

        database_url = ConfigService.get_readonly_database_url()
        fp = hashlib.sha256(database_url.encode("utf-8")).hexdigest()[:10]
        self._logger.debug("Using database fingerprint: %s", fp)
        engine = ConfigService.create_readonly_engine(database_url)
        self._engine = engine

        redis_url = ConfigService.get_redis_url()
        if redis_url:
            self._counter_store = RedisCounterStore(ConfigService.create_redis_client(redis_url))
            self._logger.info("Rate limiter using Redis counters")
        else:
            self._counter_store = InMemoryCounterStore()
            self._logger.warning(
                "STORE_NL2SQL_REDIS_URL not set; rate limiter using in-process counters"
            )

        limits = ConfigService.get_rate_limit_config()
        pipeline = AIQueryPipeline(
            SchemaContextProvider(engine),
            PydanticAICompletionClient(ConfigService.get_llm_config()),
        )
        service = ChatService(
            pipeline,
            QueryExecutor(engine, max_rows=ConfigService.result_row_limit()),
            RateLimiter(
                self._counter_store,
                max_requests=limits.max_requests,
                window_seconds=limits.window_seconds,
            ),
        )
        self._logger.info(
            "ChatService ready (dialect=%s, rate_limit=%d/%ds)",
            engine.dialect.name,
            limits.max_requests,
            limits.window_seconds,
        )
        return service

    async def shutdown(self) -> None:
        """Dispose of the engine and close the Redis client."""
        async with self._initialization_lock:
            if isinstance(self._counter_store, RedisCounterStore):
                try:
                    await self._counter_store.close()
                except OSError as exc:
                    self._logger.warning("Error closing Redis client: %s", exc)
            if self._engine is not None:
                self._engine.dispose()
                self._logger.debug("Database engine disposed")
            self._chat_service = None
            self._engine = None
            self._counter_store = None
            self._logger.info("ChatService shutdown completed")
