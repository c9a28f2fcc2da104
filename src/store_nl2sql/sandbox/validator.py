"""Pattern-based admission control for model-generated SQL.

`validate_sql` is a pure string transformation plus an error list. It never
executes anything and needs no database, so every rule can be unit tested in
isolation. It does not parse SQL: anything that matches an unsafe pattern is
rejected.
"""

from __future__ import annotations

import logging
import re

from store_nl2sql.models import SqlValidationResult
from store_nl2sql.sandbox.constants import (
    DANGEROUS_FUNCTION_PATTERNS,
    DEFAULT_LIMIT,
    FORBIDDEN_KEYWORD_PATTERNS,
    LIMIT_KEYWORD_PATTERN,
    LIMIT_VALUE_PATTERN,
    MAX_LIMIT,
    NON_ASCII_PATTERN,
    SELECT_INTO_PATTERN,
    SELECT_START_PATTERN,
    TENANT_FILTER_PATTERN,
    TRAILING_SEMICOLON_PATTERN,
    UNION_PATTERN,
    WITH_START_PATTERN,
)

_logger = logging.getLogger(__name__)


def _at_top_level(sql: str, pos: int) -> bool:
    """True when `pos` sits outside every parenthesis and string literal."""
    depth = 0
    in_string = False
    for ch in sql[:pos]:
        if ch == "'":
            in_string = not in_string
        elif not in_string:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
    return depth == 0 and not in_string


def _outer_match(pattern: re.Pattern[str], sql: str) -> re.Match[str] | None:
    return next((m for m in pattern.finditer(sql) if _at_top_level(sql, m.start())), None)


def _normalize_limit(sql: str, errors: list[str]) -> str:
    """Cap an oversized outer LIMIT or append the default one.

    LIMIT clauses inside subqueries are left alone.
    """
    match = _outer_match(LIMIT_VALUE_PATTERN, sql)
    if match:
        if int(match.group(1)) > MAX_LIMIT:
            return replace_limit(sql, MAX_LIMIT)
        return sql
    if _outer_match(LIMIT_KEYWORD_PATTERN, sql):
        # LIMIT ALL / LIMIT $2: appending another LIMIT would only produce bad SQL
        errors.append("LIMIT must be a numeric literal")
        return sql
    return f"{sql} LIMIT {DEFAULT_LIMIT}"


def validate_sql(sql: str) -> SqlValidationResult:
    """Apply the sandbox rules to `sql` and return the normalized result.

    All violations are collected. The only early exit is for empty input,
    where no later rule has anything to inspect.
    """
    if not sql or not sql.strip():
        return SqlValidationResult(valid=False, sql="", errors=["SQL query is empty"])

    errors: list[str] = []
    normalized = sql.strip()

    if NON_ASCII_PATTERN.search(normalized):
        errors.append("SQL must contain only ASCII characters")

    normalized = TRAILING_SEMICOLON_PATTERN.sub("", normalized, count=1)
    if ";" in normalized:
        errors.append("Multi-statement SQL is not allowed")

    if "--" in normalized or "/*" in normalized:
        errors.append("SQL comments are not allowed")

    if not SELECT_START_PATTERN.search(normalized):
        errors.append("Only SELECT queries are allowed")

    if WITH_START_PATTERN.search(normalized):
        errors.append("CTE (WITH) queries are not allowed")

    if SELECT_INTO_PATTERN.search(normalized):
        errors.append("SELECT INTO is not allowed")

    errors.extend(
        f"Forbidden keyword detected: {keyword}"
        for keyword, pattern in FORBIDDEN_KEYWORD_PATTERNS
        if pattern.search(normalized)
    )

    errors.extend(
        f"Dangerous function detected: {name}"
        for name, pattern in DANGEROUS_FUNCTION_PATTERNS
        if pattern.search(normalized)
    )

    if UNION_PATTERN.search(normalized):
        errors.append("UNION queries are not allowed")

    if not TENANT_FILTER_PATTERN.search(normalized):
        errors.append("Query must filter by store_id = $1 for tenant isolation")

    normalized = _normalize_limit(normalized, errors)

    if errors:
        _logger.debug("SQL rejected by sandbox: %s", errors)

    return SqlValidationResult(valid=not errors, sql=normalized, errors=errors)


def extract_limit(sql: str) -> int | None:
    """Return the numeric value of the outer LIMIT clause, if any."""
    match = _outer_match(LIMIT_VALUE_PATTERN, sql)
    return int(match.group(1)) if match else None


def replace_limit(sql: str, value: int) -> str:
    """Return `sql` with its outer numeric LIMIT set to `value`.

    SQL without an outer numeric LIMIT is returned unchanged.
    """
    match = _outer_match(LIMIT_VALUE_PATTERN, sql)
    if match is None:
        return sql
    return f"{sql[: match.start()]}LIMIT {value}{sql[match.end() :]}"
