"""SQL sandbox: pattern rules plus an AST scope check.

`validate_sql` is the admission gate every model-generated statement must pass;
`SqlScopeInspector` adds table allow-listing on top of it.
"""

from __future__ import annotations

from .constants import DANGEROUS_FUNCTIONS, DEFAULT_LIMIT, FORBIDDEN_KEYWORDS, MAX_LIMIT
from .scope import SqlScopeInspector
from .validator import extract_limit, replace_limit, validate_sql

__all__ = [
    "DANGEROUS_FUNCTIONS",
    "DEFAULT_LIMIT",
    "FORBIDDEN_KEYWORDS",
    "MAX_LIMIT",
    "SqlScopeInspector",
    "extract_limit",
    "replace_limit",
    "validate_sql",
]
