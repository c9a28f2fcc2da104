"""MCP tool registration for the store chat features.

Exposes `register_chat_tools`, which attaches the chat tools to a FastMCP
instance and delegates to the `ChatService` owned by `ChatServiceManager`.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from store_nl2sql.charts import convert_chart_type
from store_nl2sql.errors import AppError
from store_nl2sql.models import ChartMeta, ChartSpecResult, ChartType, ChatResponse
from store_nl2sql.pipeline import ChatService
from store_nl2sql.services.service_manager import ChatServiceManager

_logger = get_logger(__name__)
MAX_QUESTION_DISPLAY = 100


def _tool_error(exc: AppError) -> ToolError:
    return ToolError(json.dumps(exc.to_dict()))


def register_chat_tools(mcp: FastMCP, manager: ChatServiceManager | None = None) -> None:
    """Register the question, suggestion and chart conversion tools."""

    def _manager() -> ChatServiceManager:
        return manager or ChatServiceManager.get_instance()

    @mcp.tool
    async def ask_store_question(
        ctx: Context,
        store_id: Annotated[str, Field(description="Store UUID; all data is scoped to it")],
        question: Annotated[
            str, Field(description="Plain-language question about the store's sales data")
        ],
    ) -> ChatResponse:  # pyright: ignore[reportUnusedFunction]
        """Answer a question about one store's orders, products, customers and categories.

        Returns the explanation, the executed SQL, result rows and, when the
        data suits one, a Chart.js configuration.
        """
        preview = question[:MAX_QUESTION_DISPLAY] + (
            "..." if len(question) > MAX_QUESTION_DISPLAY else ""
        )
        _logger.info("ask_store_question: store=%s question=%s", store_id, preview)

        try:
            service = await _manager().get_chat_service()
        except ValueError as exc:
            await ctx.error(f"Chat service not configured: {exc}")
            raise

        try:
            return await service.ask(store_id, question)
        except AppError as exc:
            _logger.warning("ask_store_question failed (%s): %s", exc.code, exc.message)
            raise _tool_error(exc) from exc

    @mcp.tool
    def chat_suggestions() -> list[str]:  # pyright: ignore[reportUnusedFunction]
        """Return starter questions a store owner can ask."""
        return ChatService.get_suggestions()

    @mcp.tool
    def convert_chart(
        current_config: Annotated[
            ChartSpecResult, Field(description="Chart or table result previously returned")
        ],
        rows: Annotated[
            list[dict[str, Any]], Field(description="Result rows the chart was built from")
        ],
        target_type: Annotated[ChartType, Field(description="Chart type to switch to")],
        meta: Annotated[ChartMeta, Field(description="Column mapping returned as chartMeta")],
        title: Annotated[str, Field(description="Chart title")],
    ) -> ChartSpecResult:  # pyright: ignore[reportUnusedFunction]
        """Re-render a chart result as a different chart type or as a table."""
        return convert_chart_type(current_config, rows, target_type, meta, title)

    _ = (ask_store_question, chat_suggestions, convert_chart)
