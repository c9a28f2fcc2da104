"""Chat entry point: question in, executed and charted answer out.

Flow: input checks, rate limiter, AI pipeline, read-only executor, chart
mapping. Input checks run before anything is charged or called so that
malformed requests never consume quota.
"""

from __future__ import annotations

import asyncio

from fastmcp.utilities.logging import get_logger

from store_nl2sql.charts import to_chart_config
from store_nl2sql.execute import QueryExecutor
from store_nl2sql.models import ChartMeta, ChartSpecSummary, ChatResponse
from store_nl2sql.pipeline.ai_pipeline import AIQueryPipeline, validate_question
from store_nl2sql.ratelimit import RateLimiter
from store_nl2sql.tenant import ensure_store_id

_logger = get_logger(__name__)

DEFAULT_SUGGESTIONS: tuple[str, ...] = (
    "What was my total revenue this month?",
    "What are my top 5 selling products?",
    "How many new customers did I get this week?",
    "What is my average order value?",
    "Show revenue trend for the last 30 days",
    "Which product categories perform best?",
)


class ChatService:
    """Answers store owner questions end to end."""

    def __init__(
        self,
        pipeline: AIQueryPipeline,
        executor: QueryExecutor,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.executor = executor
        self.rate_limiter = rate_limiter

    async def ask(self, store_id: str, question: str) -> ChatResponse:
        """Answer `question` with data from `store_id` only.

        Raises:
            ValidationError: Empty or oversized question, malformed tenant key,
                or generated SQL rejected by the sandbox
            RateLimitError: The store is over quota for the current window
            AIError: AI service, reply decoding or query execution failed
        """
        validate_question(question)
        store_id = ensure_store_id(store_id)
        _logger.info(
            "Chat service: processing question (store=%s, question_length=%d)",
            store_id,
            len(question.strip()),
        )

        if self.rate_limiter is not None:
            await self.rate_limiter.check_limit(store_id)

        query = await self.pipeline.process_question(store_id, question)
        execution = await asyncio.to_thread(self.executor.execute, query)
        chart_config = to_chart_config(query.chart_spec, execution.rows)

        spec = query.chart_spec
        response = ChatResponse(
            answer=query.explanation,
            sql=query.sql,
            rows=execution.rows,
            row_count=execution.row_count,
            duration_ms=execution.duration_ms,
            truncated=execution.truncated,
            chart_spec=ChartSpecSummary(type=spec.type, title=spec.title) if spec else None,
            chart_config=chart_config,
            chart_meta=(
                ChartMeta(
                    data_key=spec.data_key,
                    label_key=spec.label_key,
                    x_label=spec.x_label,
                    y_label=spec.y_label,
                )
                if spec
                else None
            ),
        )
        _logger.info(
            "Chat service: question answered (store=%s, row_count=%d, duration_ms=%.1f, has_chart=%s)",
            store_id,
            response.row_count,
            response.duration_ms,
            chart_config is not None,
        )
        return response

    @staticmethod
    def get_suggestions() -> list[str]:
        """Starter questions shown before the first message."""
        return list(DEFAULT_SUGGESTIONS)
