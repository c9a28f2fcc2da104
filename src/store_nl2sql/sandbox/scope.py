"""AST-level scope inspection for sandbox-approved SQL.

Runs after `validate_sql` and uses sqlglot to check two things the regex rules
cannot see: which tables a query touches, and whether the tenant filter is a
top-level AND condition of the outer WHERE. A parse failure is reported as a
note, not a rejection; the read-only database remains the final arbiter.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache
import logging

import sqlglot
from sqlglot import expressions as sgl_exp

from store_nl2sql.models import ScopeCheckResult
from store_nl2sql.sandbox.constants import ANALYTICS_TABLES, TENANT_COLUMN

_TENANT_PARAM = "$1"


@lru_cache(maxsize=256)
def _cached_parse(sql: str, dialect: str) -> sqlglot.Expression | None:
    """Small cache for parse results; the same SQL is often inspected twice."""
    return sqlglot.parse_one(sql, dialect=dialect)


def _qualified_name(table: sgl_exp.Table) -> str:
    return f"{table.db}.{table.name}" if table.db else table.name


class SqlScopeInspector:
    """Checks table usage and tenant-filter placement in a parsed query."""

    def __init__(
        self,
        allowed_tables: Iterable[str] = ANALYTICS_TABLES,
        dialect: str = "postgres",
        logger: logging.Logger | None = None,
    ) -> None:
        self.allowed_tables = frozenset(t.lower() for t in allowed_tables)
        self.dialect = dialect
        self._logger = logger or logging.getLogger(__name__)

    def inspect(self, sql: str) -> ScopeCheckResult:
        try:
            parsed = _cached_parse(sql, self.dialect)
        except Exception as e:  # noqa: BLE001 - returning typed note
            self._logger.warning("Scope inspection could not parse SQL: %s", e)
            return ScopeCheckResult(notes=[f"SQL parsing error: {e}"])
        if parsed is None:
            return ScopeCheckResult(notes=["Failed to parse SQL query"])

        errors: list[str] = []
        notes: list[str] = []

        tables: list[str] = []
        for table in parsed.find_all(sgl_exp.Table):
            if not table.name:
                continue
            name = _qualified_name(table)
            if name not in tables:
                tables.append(name)
            if not self._is_allowed(table):
                errors.append(f"Table not permitted: {name}")

        if self._mentions_tenant_param(parsed):
            if not self._has_top_level_tenant_filter(parsed):
                errors.append("Tenant filter must be a top-level AND condition")
        else:
            notes.append("Tenant parameter not recognised in AST; filter placement not checked")

        return ScopeCheckResult(tables=tables, errors=errors, notes=notes)

    # ---- internal ------------------------------------------------------------

    def _is_allowed(self, table: sgl_exp.Table) -> bool:
        schema = (table.db or "").lower()
        if schema and schema != "public":
            return False
        return table.name.lower() in self.allowed_tables

    def _is_tenant_param(self, node: sgl_exp.Expression) -> bool:
        if not isinstance(node, sgl_exp.Parameter | sgl_exp.Placeholder | sgl_exp.Var):
            return False
        return node.sql(dialect=self.dialect) == _TENANT_PARAM

    def _mentions_tenant_param(self, parsed: sgl_exp.Expression) -> bool:
        return any(
            self._is_tenant_param(node)
            for node in parsed.find_all(sgl_exp.Parameter, sgl_exp.Placeholder, sgl_exp.Var)
        )

    def _is_tenant_equality(self, node: sgl_exp.Expression) -> bool:
        if not isinstance(node, sgl_exp.EQ):
            return False
        left, right = node.this, node.expression
        for col, param in ((left, right), (right, left)):
            if (
                isinstance(col, sgl_exp.Column)
                and col.name.lower() == TENANT_COLUMN
                and self._is_tenant_param(param)
            ):
                return True
        return False

    def _has_top_level_tenant_filter(self, parsed: sgl_exp.Expression) -> bool:
        select = parsed if isinstance(parsed, sgl_exp.Select) else parsed.find(sgl_exp.Select)
        if select is None:
            return False
        where = select.args.get("where")
        if where is None:
            return False
        condition = where.this.unnest()
        if isinstance(condition, sgl_exp.And):
            conjuncts = [c.unnest() for c in condition.flatten()]
        else:
            conjuncts = [condition]
        return any(self._is_tenant_equality(c) for c in conjuncts)
