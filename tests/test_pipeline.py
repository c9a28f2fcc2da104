from __future__ import annotations

import asyncio

import pytest
import sqlalchemy as sa

from store_nl2sql.context import SchemaContextProvider
from store_nl2sql.errors import AIError, SchemaContextError, UnsafeSqlError, ValidationError
from store_nl2sql.pipeline import MAX_QUESTION_LENGTH, AIQueryPipeline
from tests.support import REVENUE_SQL, STORE_ID, RaisingClient, ScriptedClient, make_engine


def _pipeline(engine: sa.Engine, client: object) -> AIQueryPipeline:
    return AIQueryPipeline(SchemaContextProvider(engine), client)  # type: ignore[arg-type]


def test_returns_parameterised_query(store_engine: sa.Engine) -> None:
    client = ScriptedClient()
    result = asyncio.run(
        _pipeline(store_engine, client).process_question(STORE_ID, "  What is my total revenue?  ")
    )
    assert result.params == [STORE_ID]
    assert result.sql == f"{REVENUE_SQL} LIMIT 100"
    assert result.explanation == "Total revenue."
    assert result.chart_spec is None

    prompt_text, question = client.prompts[0]
    assert question == "What is my total revenue?"
    assert "- Total orders: 3" in prompt_text
    assert STORE_ID not in prompt_text


def test_upper_case_store_id_is_canonicalised(store_engine: sa.Engine) -> None:
    client = ScriptedClient()
    result = asyncio.run(
        _pipeline(store_engine, client).process_question(STORE_ID.upper(), "Total revenue?")
    )
    assert result.params == [STORE_ID]
    assert "- Total orders: 3" in client.prompts[0][0]


def test_unsafe_sql_is_rejected_with_violations(store_engine: sa.Engine) -> None:
    client = ScriptedClient(sql="SELECT * FROM orders; DROP TABLE orders")
    with pytest.raises(UnsafeSqlError) as excinfo:
        asyncio.run(_pipeline(store_engine, client).process_question(STORE_ID, "drop it"))
    err = excinfo.value
    assert isinstance(err, ValidationError)
    assert err.message == "Unable to process this question. Please try rephrasing."
    assert "Multi-statement SQL is not allowed" in err.violations
    assert "Forbidden keyword detected: DROP" in err.violations
    assert err.to_dict()["error"]["violations"] == err.violations  # type: ignore[index]


def test_table_outside_allowlist_is_rejected(store_engine: sa.Engine) -> None:
    client = ScriptedClient(sql="SELECT * FROM sync_logs WHERE store_id = $1")
    with pytest.raises(UnsafeSqlError) as excinfo:
        asyncio.run(_pipeline(store_engine, client).process_question(STORE_ID, "logs?"))
    assert excinfo.value.violations == ["Table not permitted: sync_logs"]


@pytest.mark.parametrize("question", ["", "   "])
def test_empty_question(store_engine: sa.Engine, question: str) -> None:
    client = ScriptedClient()
    with pytest.raises(ValidationError, match="Question cannot be empty"):
        asyncio.run(_pipeline(store_engine, client).process_question(STORE_ID, question))
    assert client.prompts == []


def test_question_length_boundary(store_engine: sa.Engine) -> None:
    client = ScriptedClient()
    pipeline = _pipeline(store_engine, client)
    asyncio.run(pipeline.process_question(STORE_ID, "x" * MAX_QUESTION_LENGTH))
    with pytest.raises(ValidationError, match="Question too long: 2001 chars"):
        asyncio.run(pipeline.process_question(STORE_ID, "x" * (MAX_QUESTION_LENGTH + 1)))


@pytest.mark.parametrize("store_id", ["", "store-1", "3f1c9a52-8e0b-4d7a-9c61-2b5e7f4a1d0"])
def test_invalid_store_id(store_engine: sa.Engine, store_id: str) -> None:
    client = ScriptedClient()
    with pytest.raises(ValidationError, match="valid UUID"):
        asyncio.run(_pipeline(store_engine, client).process_question(store_id, "Revenue?"))
    assert client.prompts == []


def test_ai_errors_pass_through(store_engine: sa.Engine) -> None:
    client = RaisingClient(AIError("AI response is not a valid JSON object"))
    with pytest.raises(AIError, match="not a valid JSON object"):
        asyncio.run(_pipeline(store_engine, client).process_question(STORE_ID, "Revenue?"))


def test_unexpected_errors_are_wrapped(store_engine: sa.Engine) -> None:
    client = RaisingClient(KeyError("boom"))
    with pytest.raises(AIError, match="Pipeline failed unexpectedly") as excinfo:
        asyncio.run(_pipeline(store_engine, client).process_question(STORE_ID, "Revenue?"))
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_schema_context_failure_passes_through() -> None:
    with pytest.raises(SchemaContextError):
        asyncio.run(_pipeline(make_engine(), ScriptedClient()).process_question(STORE_ID, "Revenue?"))
