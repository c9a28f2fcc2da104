"""Natural-language question to validated SQL.

Flow: tenant and question checks, store metadata, system prompt, AI
completion, sandbox rules, scope inspection. The result is an
`AIQueryResult` whose first positional parameter is the tenant key.
"""

from __future__ import annotations

import asyncio
from typing import NoReturn

from fastmcp.utilities.logging import get_logger

from store_nl2sql.context import SchemaContextProvider
from store_nl2sql.errors import AIError, AppError, UnsafeSqlError, ValidationError
from store_nl2sql.llm import CompletionClient
from store_nl2sql.models import AIQueryResult
from store_nl2sql.prompts import build_system_prompt
from store_nl2sql.sandbox import SqlScopeInspector, validate_sql
from store_nl2sql.tenant import ensure_store_id

_logger = get_logger(__name__)

MAX_QUESTION_LENGTH = 2000
UNSAFE_SQL_MESSAGE = "Unable to process this question. Please try rephrasing."
_SQL_PREVIEW_CHARS = 200


def validate_question(question: str | None) -> str:
    """Return the trimmed question or raise `ValidationError`."""
    if not question or not question.strip():
        msg = "Question cannot be empty"
        raise ValidationError(msg)
    trimmed = question.strip()
    if len(trimmed) > MAX_QUESTION_LENGTH:
        msg = f"Question too long: {len(trimmed)} chars (max {MAX_QUESTION_LENGTH})"
        raise ValidationError(msg)
    return trimmed


class AIQueryPipeline:
    """Turns a store owner's question into a query that is safe to execute."""

    def __init__(
        self,
        context_provider: SchemaContextProvider,
        completion_client: CompletionClient,
        scope_inspector: SqlScopeInspector | None = None,
    ) -> None:
        self.context_provider = context_provider
        self.completion_client = completion_client
        self.scope_inspector = scope_inspector or SqlScopeInspector()

    async def process_question(self, store_id: str, question: str) -> AIQueryResult:
        """Generate and validate SQL for `question` scoped to `store_id`.

        Raises:
            ValidationError: For a malformed tenant key or question
            UnsafeSqlError: When the generated SQL fails sandbox or scope rules
            AIError: When the AI service fails or returns unusable output
            SchemaContextError: When store metadata cannot be read
        """
        store_id = ensure_store_id(store_id)
        trimmed = validate_question(question)
        _logger.info(
            "AI pipeline: processing question (store=%s, question_length=%d)",
            store_id,
            len(trimmed),
        )

        try:
            ctx = await asyncio.to_thread(self.context_provider.get_store_context, store_id)
            prompt_text = build_system_prompt(ctx)
            reply = await self.completion_client.complete(prompt_text, trimmed)

            validation = validate_sql(reply.sql)
            if not validation.valid:
                self._reject(store_id, reply.sql, validation.errors, "SQL validation failed")

            scope = self.scope_inspector.inspect(validation.sql)
            for note in scope.notes:
                _logger.debug("AI pipeline: scope note: %s", note)
            if not scope.ok:
                self._reject(store_id, reply.sql, scope.errors, "scope inspection failed")
        except AppError:
            raise
        except Exception as exc:
            _logger.exception("AI pipeline: unexpected failure (store=%s)", store_id)
            msg = "Pipeline failed unexpectedly"
            raise AIError(msg) from exc

        result = AIQueryResult(
            sql=validation.sql,
            params=[store_id],
            explanation=reply.explanation,
            chart_spec=reply.chart_spec,
        )
        _logger.info(
            "AI pipeline: query validated (store=%s, sql_length=%d, tables=%s)",
            store_id,
            len(result.sql),
            ",".join(scope.tables),
        )
        return result

    @staticmethod
    def _reject(store_id: str, sql: str, violations: list[str], reason: str) -> NoReturn:
        _logger.warning(
            "AI pipeline: %s (store=%s, errors=%s, sql_preview=%r)",
            reason,
            store_id,
            violations,
            sql[:_SQL_PREVIEW_CHARS],
        )
        raise UnsafeSqlError(UNSAFE_SQL_MESSAGE, violations)
