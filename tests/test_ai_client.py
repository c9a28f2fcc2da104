from __future__ import annotations

import asyncio
import json

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, SystemPromptPart, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from store_nl2sql.errors import AIError
from store_nl2sql.llm import PydanticAICompletionClient, parse_ai_reply
from store_nl2sql.services import LLMConfig

SQL = "SELECT COUNT(*) AS n FROM orders WHERE store_id = $1"


def test_parse_reply_with_chart_spec() -> None:
    raw = json.dumps(
        {
            "sql": SQL,
            "explanation": "Counts orders.",
            "chartSpec": {
                "type": "bar",
                "title": "Orders",
                "xLabel": "Day",
                "dataKey": "n",
                "labelKey": "day",
            },
        }
    )
    reply = parse_ai_reply(raw)
    assert reply.sql == SQL
    assert reply.explanation == "Counts orders."
    assert reply.chart_spec is not None
    assert reply.chart_spec.x_label == "Day"
    assert reply.chart_spec.y_label is None
    assert reply.chart_spec.data_key == "n"


def test_parse_reply_strips_code_fence() -> None:
    raw = '```json\n{"sql": "' + SQL + '", "explanation": "x", "chartSpec": null}\n```'
    reply = parse_ai_reply(raw)
    assert reply.sql == SQL
    assert reply.chart_spec is None


@pytest.mark.parametrize(
    "chart_spec",
    [
        {"type": "scatter", "title": "t", "dataKey": "n", "labelKey": "d"},
        {"type": "bar", "dataKey": "n", "labelKey": "d"},
        {"type": "bar", "title": "t", "dataKey": 3, "labelKey": "d"},
        "bar",
    ],
)
def test_invalid_chart_spec_means_no_chart(chart_spec: object) -> None:
    reply = parse_ai_reply(json.dumps({"sql": SQL, "explanation": "x", "chartSpec": chart_spec}))
    assert reply.chart_spec is None


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("not json", "Failed to parse AI response as JSON"),
        ("[1, 2]", "not a valid JSON object"),
        ('{"explanation": "x"}', 'missing required "sql"'),
        ('{"sql": "   ", "explanation": "x"}', 'missing required "sql"'),
        ('{"sql": "SELECT 1"}', 'missing required "explanation"'),
        ('{"sql": "SELECT 1", "explanation": 5}', 'missing required "explanation"'),
        (
            '{"sql": "SELECT 1", "explanation": "x", "chartSpec": null, "params": ["a"]}',
            "unexpected fields: params",
        ),
        ('{"sql": "SELECT 1", "explanation": "x", "chart_spec": null}', "unexpected fields: chart_spec"),
    ],
)
def test_parse_reply_errors(raw: str, message: str) -> None:
    with pytest.raises(AIError, match=message):
        parse_ai_reply(raw)


def test_pydantic_ai_client_sends_prompt_and_question() -> None:
    seen: dict[str, str] = {}

    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        for message in messages:
            for part in message.parts:
                if isinstance(part, SystemPromptPart):
                    seen["system"] = part.content
                elif hasattr(part, "content") and isinstance(part.content, str):
                    seen["user"] = part.content
        return ModelResponse(
            parts=[TextPart(json.dumps({"sql": SQL, "explanation": "Counts.", "chartSpec": None}))]
        )

    client = PydanticAICompletionClient(LLMConfig(), model=FunctionModel(respond))
    reply = asyncio.run(client.complete("SYSTEM PROMPT", "How many orders?"))
    assert reply.sql == SQL
    assert seen["system"] == "SYSTEM PROMPT"
    assert seen["user"] == "How many orders?"


def test_pydantic_ai_client_wraps_model_failures() -> None:
    def explode(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        msg = "provider unavailable"
        raise RuntimeError(msg)

    client = PydanticAICompletionClient(LLMConfig(), model=FunctionModel(explode))
    with pytest.raises(AIError, match="Failed to get response from the AI service") as excinfo:
        asyncio.run(client.complete("prompt", "question"))
    assert "provider unavailable" not in excinfo.value.message


def test_pydantic_ai_client_rejects_empty_output() -> None:
    def empty(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart("   ")])

    client = PydanticAICompletionClient(LLMConfig(), model=FunctionModel(empty))
    with pytest.raises(AIError):
        asyncio.run(client.complete("prompt", "question"))
