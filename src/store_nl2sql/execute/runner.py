"""Read-only execution of sandbox-validated SQL.

The runner never sees raw model output. It receives an `AIQueryResult` whose
SQL already passed the sandbox and whose first positional parameter is the
tenant key, binds the parameters through SQLAlchemy, and returns JSON-safe
rows with timing.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time as dt_time
from decimal import Decimal
import re
import time
from uuid import UUID

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from store_nl2sql.errors import QueryExecutionError, QueryTimeoutError
from store_nl2sql.models import AIQueryResult, JsonScalar, QueryExecutionResult
from store_nl2sql.sandbox import MAX_LIMIT, extract_limit, replace_limit

_logger = get_logger(__name__)

_POSITIONAL_PARAM = re.compile(r"\$(\d+)\b")
_TIMEOUT_PATTERN = re.compile(
    r"canceling statement due to statement timeout|statement timeout", re.IGNORECASE
)
_PERMISSION_PATTERN = re.compile(r"permission denied", re.IGNORECASE)
_SYNTAX_PATTERN = re.compile(r"syntax error", re.IGNORECASE)

TIMEOUT_MESSAGE = "The query took too long to execute. Try asking a simpler question."
PERMISSION_MESSAGE = "Query execution failed due to a permissions error."
SYNTAX_MESSAGE = (
    "The generated query contained a syntax error. Please try rephrasing your question."
)
GENERIC_MESSAGE = "Query execution failed unexpectedly."


def bind_positional_params(sql: str, params: Sequence[object]) -> tuple[str, dict[str, object]]:
    """Rewrite `$n` placeholders to named binds and build the bind mapping.

    `$1` becomes `:p1` bound to `params[0]`, and so on. Values are always
    bound by the driver, never interpolated into the text.
    """
    text = _POSITIONAL_PARAM.sub(lambda m: f":p{m.group(1)}", sql)
    binds = {f"p{i}": value for i, value in enumerate(params, start=1)}
    return text, binds


def to_json_safe(value: object) -> JsonScalar:
    """Convert a driver value to a JSON scalar.

    Decimals become strings so monetary values keep their exact digits.
    """
    if value is None or isinstance(value, bool | int | float | str):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime | date | dt_time):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).hex()
    return str(value)


def _convert_rows(
    rows: Iterable[sa.RowMapping], columns: list[str]
) -> list[dict[str, JsonScalar]]:
    return [{col: to_json_safe(row[col]) for col in columns} for row in rows]


def _classify_error(exc: SQLAlchemyError) -> QueryExecutionError | QueryTimeoutError:
    detail = str(getattr(exc, "orig", None) or exc)
    if _TIMEOUT_PATTERN.search(detail):
        return QueryTimeoutError(TIMEOUT_MESSAGE)
    if _PERMISSION_PATTERN.search(detail):
        return QueryExecutionError(PERMISSION_MESSAGE)
    if _SYNTAX_PATTERN.search(detail):
        return QueryExecutionError(SYNTAX_MESSAGE)
    return QueryExecutionError(GENERIC_MESSAGE)


class QueryExecutor:
    """Executes validated queries against the read-only engine.

    `execute` is synchronous; async callers should run it in a worker thread.
    """

    def __init__(self, engine: sa.Engine, max_rows: int = MAX_LIMIT) -> None:
        self.engine = engine
        self.max_rows = max_rows

    def execute(self, query: AIQueryResult) -> QueryExecutionResult:
        """Run `query` and return its rows.

        The statement runs with its outer LIMIT raised by one. `truncated` is
        set only when that extra row exists, or when the result exceeds
        `max_rows`.

        Raises:
            QueryTimeoutError: If the statement timeout cancelled the query
            QueryExecutionError: For permission, syntax or other database failures
        """
        limit = extract_limit(query.sql)
        cap = self.max_rows if limit is None else min(limit, self.max_rows)
        run_sql = query.sql if limit is None else replace_limit(query.sql, limit + 1)
        sql_text, binds = bind_positional_params(run_sql, query.params)
        _logger.info(
            "Query executor: start (sql_length=%d, param_count=%d)",
            len(query.sql),
            len(binds),
        )

        start = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(sa.text(sql_text), binds)
                columns = list(result.keys())
                raw_rows = result.mappings().fetchmany(cap + 1)
        except SQLAlchemyError as exc:
            duration_ms = (time.perf_counter() - start) * 1000.0
            _logger.error(
                "Query executor: execution failed (duration_ms=%.1f): %s", duration_ms, exc
            )
            raise _classify_error(exc) from exc

        duration_ms = (time.perf_counter() - start) * 1000.0
        truncated = len(raw_rows) > cap
        rows = _convert_rows(raw_rows[:cap], columns)
        row_count = len(rows)

        _logger.info(
            "Query executor: finished (duration_ms=%.1f, row_count=%d, truncated=%s)",
            duration_ms,
            row_count,
            truncated,
        )
        return QueryExecutionResult(
            rows=rows,
            row_count=row_count,
            duration_ms=duration_ms,
            truncated=truncated,
        )
