"""Admission constants for the SQL sandbox.

The keyword and function blocklists are versioned. Any change to their
contents must bump `BLOCKLIST_VERSION` and update the pinned test fixture.
"""

from __future__ import annotations

import re
from typing import Final

BLOCKLIST_VERSION: Final[int] = 1

DEFAULT_LIMIT: Final[int] = 100
MAX_LIMIT: Final[int] = 1000

FORBIDDEN_KEYWORDS: Final[tuple[str, ...]] = (
    # data mutation
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    "GRANT",
    "REVOKE",
    # execution
    "EXEC",
    "EXECUTE",
    # statement scope
    "COPY",
    "SET",
    "RESET",
    "CALL",
    "RETURNING",
)

DANGEROUS_FUNCTIONS: Final[tuple[str, ...]] = (
    # filesystem
    "pg_read_file",
    "pg_read_binary_file",
    "pg_write_file",
    "pg_ls_dir",
    "pg_stat_file",
    # process control
    "pg_sleep",
    "pg_terminate_backend",
    "pg_cancel_backend",
    # configuration
    "pg_reload_conf",
    "pg_rotate_logfile",
    "set_config",
    # cross-database
    "dblink",
    "dblink_connect",
    "dblink_exec",
    # large objects
    "lo_import",
    "lo_export",
    "lo_get",
    "lo_put",
    # query-to-document
    "query_to_xml",
    "query_to_json",
)

# Tables the model is allowed to read. Mirrors the schema text in the prompt.
ANALYTICS_TABLES: Final[frozenset[str]] = frozenset(
    {"orders", "order_items", "products", "customers", "categories", "coupons"}
)

TENANT_COLUMN: Final[str] = "store_id"


def _word(term: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


FORBIDDEN_KEYWORD_PATTERNS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = tuple(
    (kw, _word(kw)) for kw in FORBIDDEN_KEYWORDS
)
DANGEROUS_FUNCTION_PATTERNS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = tuple(
    (fn, _word(fn)) for fn in DANGEROUS_FUNCTIONS
)

NON_ASCII_PATTERN: Final[re.Pattern[str]] = re.compile(r"[^\x20-\x7E\t\n\r]")
TRAILING_SEMICOLON_PATTERN: Final[re.Pattern[str]] = re.compile(r";\s*$")
SELECT_START_PATTERN: Final[re.Pattern[str]] = re.compile(r"^SELECT\b", re.IGNORECASE)
WITH_START_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*WITH\b", re.IGNORECASE)
SELECT_INTO_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\bSELECT\b[\s\S]+\bINTO\b", re.IGNORECASE
)
UNION_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bUNION\b", re.IGNORECASE)

# `store_id = $1` or `$1 = store_id`, optionally alias-qualified (`o.store_id`).
# `$10` and friends must not satisfy the filter.
TENANT_FILTER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:\bstore_id\s*=\s*\$1(?!\d))|(?:\$1(?!\d)\s*=\s*(?:\w+\.)?store_id\b)",
    re.IGNORECASE,
)

LIMIT_KEYWORD_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bLIMIT\b", re.IGNORECASE)
LIMIT_VALUE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bLIMIT\s+(\d+)", re.IGNORECASE)
