from __future__ import annotations

import asyncio
import json

from fastmcp import Client, FastMCP
from fastmcp.exceptions import ToolError
import pytest
import sqlalchemy as sa

from store_nl2sql.context import SchemaContextProvider
from store_nl2sql.execute import QueryExecutor
from store_nl2sql.mcp_tools import register_chat_tools
from store_nl2sql.pipeline import AIQueryPipeline, ChatService
from store_nl2sql.ratelimit import InMemoryCounterStore, RateLimiter
from store_nl2sql.services import ConfigService
from store_nl2sql.services.service_manager import ChatServiceManager
from tests.support import STORE_ID, ScriptedClient


def test_int_settings_fall_back_and_clamp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_NL2SQL_RATE_LIMIT_MAX", "abc")
    monkeypatch.setenv("STORE_NL2SQL_RATE_LIMIT_WINDOW", "-5")
    monkeypatch.setenv("STORE_NL2SQL_ROW_LIMIT", "250")
    cfg = ConfigService.get_rate_limit_config()
    assert cfg.max_requests == 20
    assert cfg.window_seconds == 1
    assert ConfigService.result_row_limit() == 250


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "STORE_NL2SQL_LLM_MODEL",
        "STORE_NL2SQL_LLM_TIMEOUT",
        "STORE_NL2SQL_STATEMENT_TIMEOUT_MS",
        "STORE_NL2SQL_REDIS_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    llm = ConfigService.get_llm_config()
    assert llm.model == "openai:gpt-4o"
    assert llm.temperature == 0.0
    assert llm.max_tokens == 1024
    assert llm.timeout_seconds == 30.0
    assert ConfigService.statement_timeout_ms() == 5000
    assert ConfigService.get_redis_url() is None


def test_missing_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STORE_NL2SQL_READONLY_DATABASE_URL", raising=False)
    with pytest.raises(ValueError, match="STORE_NL2SQL_READONLY_DATABASE_URL"):
        ConfigService.get_readonly_database_url()


def test_manager_builds_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_NL2SQL_READONLY_DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.delenv("STORE_NL2SQL_REDIS_URL", raising=False)
    monkeypatch.setenv("STORE_NL2SQL_RATE_LIMIT_MAX", "7")

    async def scenario() -> None:
        manager = ChatServiceManager.get_instance()
        service = await manager.get_chat_service()
        assert await manager.get_chat_service() is service
        assert manager.is_initialized
        assert service.rate_limiter is not None
        assert service.rate_limiter.max_requests == 7
        assert isinstance(service.rate_limiter.store, InMemoryCounterStore)
        await manager.shutdown()
        assert not manager.is_initialized

    asyncio.run(scenario())


def test_manager_is_a_singleton() -> None:
    assert ChatServiceManager.get_instance() is ChatServiceManager.get_instance()


def _installed_manager(engine: sa.Engine) -> ChatServiceManager:
    pipeline = AIQueryPipeline(SchemaContextProvider(engine), ScriptedClient())
    service = ChatService(
        pipeline, QueryExecutor(engine), RateLimiter(InMemoryCounterStore(), max_requests=5)
    )
    manager = ChatServiceManager()
    manager.install(service, engine=engine)
    return manager


def test_tools_over_mcp(store_engine: sa.Engine) -> None:
    mcp = FastMCP("test")
    register_chat_tools(mcp, _installed_manager(store_engine))

    async def scenario() -> None:
        async with Client(mcp) as client:
            suggestions = await client.call_tool("chat_suggestions", {})
            assert suggestions.data == list(ChatService.get_suggestions())

            answer = await client.call_tool(
                "ask_store_question", {"store_id": STORE_ID, "question": "Total revenue?"}
            )
            payload = answer.structured_content
            assert payload is not None
            assert payload["rowCount"] == 1
            assert payload["chartConfig"] is None
            assert {"durationMs", "chartSpec", "chartMeta", "truncated"} <= set(payload)
            assert "row_count" not in payload

            converted = await client.call_tool(
                "convert_chart",
                {
                    "current_config": {
                        "type": "table",
                        "title": "Revenue",
                        "headers": ["category", "revenue"],
                        "rows": [["Kitchen", "1200.50"]],
                    },
                    "rows": [{"category": "Kitchen", "revenue": "1200.50"}],
                    "target_type": "bar",
                    "meta": {"dataKey": "revenue", "labelKey": "category"},
                    "title": "Revenue",
                },
            )
            chart = json.loads(converted.content[0].text)
            dataset = chart["data"]["datasets"][0]
            assert set(dataset) >= {"backgroundColor", "borderColor", "borderWidth"}
            assert dataset["data"] == [1200.5]

            with pytest.raises(ToolError, match="VALIDATION_ERROR"):
                await client.call_tool(
                    "ask_store_question", {"store_id": "nope", "question": "Total revenue?"}
                )

    asyncio.run(scenario())


def test_server_module_wires_tools() -> None:
    from store_nl2sql import server

    assert server.mcp.name == "store-nl2sql"
