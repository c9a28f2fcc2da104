"""AI completion client for the NL -> SQL call.

The model is treated as an untrusted collaborator. Its reply is decoded by
`parse_ai_reply`, an explicit validate-then-trust step: anything that is not a
JSON object with a non-empty `sql` string and an `explanation` string is an
`AIError`. Even a decoded reply stays untrusted until the sandbox accepts it.
"""

from __future__ import annotations

import json
import re
from typing import Protocol

from fastmcp.utilities.logging import get_logger
from pydantic import ValidationError as PydanticValidationError
from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from store_nl2sql.errors import AIError
from store_nl2sql.models import AIReply, ChartSpec
from store_nl2sql.services.config_service import LLMConfig

_logger = get_logger(__name__)

_FENCE_OPEN = re.compile(r"^```\w*\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?\s*```\s*$")
AI_REPLY_FIELDS = frozenset({"sql", "explanation", "chartSpec"})


class CompletionClient(Protocol):
    """Anything that can turn a prompt and a question into an `AIReply`."""

    async def complete(self, prompt_text: str, question: str) -> AIReply: ...


def _strip_code_fence(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", cleaned, count=1), count=1)
    return cleaned


def _decode_chart_spec(raw: object) -> ChartSpec | None:
    """Decode `chartSpec` leniently: an unusable spec means no chart, not a failure."""
    if not isinstance(raw, dict):
        return None
    try:
        return ChartSpec.model_validate(raw)
    except PydanticValidationError:
        _logger.debug("Discarding invalid chartSpec from AI reply")
        return None


def parse_ai_reply(raw: str) -> AIReply:
    """Decode the model's raw text into an `AIReply`.

    Raises:
        AIError: On malformed JSON, a non-object payload, missing fields or
            fields outside `sql`, `explanation` and `chartSpec`
    """
    cleaned = _strip_code_fence(raw)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        msg = "Failed to parse AI response as JSON. The AI returned invalid output."
        raise AIError(msg) from exc

    if not isinstance(payload, dict):
        msg = "AI response is not a valid JSON object"
        raise AIError(msg)

    unexpected = sorted(set(payload) - AI_REPLY_FIELDS)
    if unexpected:
        msg = f"AI response contains unexpected fields: {', '.join(unexpected)}"
        raise AIError(msg)

    sql = payload.get("sql")
    if not isinstance(sql, str) or not sql.strip():
        msg = 'AI response missing required "sql" field'
        raise AIError(msg)

    explanation = payload.get("explanation")
    if not isinstance(explanation, str):
        msg = 'AI response missing required "explanation" field'
        raise AIError(msg)

    return AIReply(
        sql=sql,
        explanation=explanation,
        chart_spec=_decode_chart_spec(payload.get("chartSpec")),
    )


class PydanticAICompletionClient:
    """`CompletionClient` backed by a PydanticAI agent.

    A fresh agent is built per call because the system prompt carries
    per-store metadata.
    """

    def __init__(self, llm: LLMConfig, model: Model | None = None) -> None:
        self.llm = llm
        self._model = model

    def build_agent(self, prompt_text: str) -> Agent[None, str]:
        settings: ModelSettings = {
            "temperature": self.llm.temperature,
            "max_tokens": self.llm.max_tokens,
            "timeout": self.llm.timeout_seconds,
        }
        return Agent(
            model=self._model or self.llm.model,
            system_prompt=prompt_text,
            output_type=str,
            model_settings=settings,
        )

    async def complete(self, prompt_text: str, question: str) -> AIReply:
        try:
            agent = self.build_agent(prompt_text)
            result = await agent.run(question)
        except Exception as exc:  # noqa: BLE001 - provider errors vary by backend
            _logger.warning("AI completion failed: %s", exc)
            msg = "Failed to get response from the AI service"
            raise AIError(msg) from exc

        raw = result.output
        if not raw or not raw.strip():
            msg = "The AI service returned an empty response"
            raise AIError(msg)
        return parse_ai_reply(raw)
