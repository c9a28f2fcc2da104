"""store-nl2sql: natural-language analytics for WooCommerce stores.

Turns a store owner's question into a validated, tenant-isolated SQL query,
executes it read-only and maps the result to an optional Chart.js chart.
"""

from store_nl2sql.errors import (
    AIError,
    AppError,
    RateLimitError,
    UnsafeSqlError,
    ValidationError,
)
from store_nl2sql.models import AIQueryResult, ChartSpec, ChatResponse, SchemaContext
from store_nl2sql.services import ConfigService

__all__ = [  # noqa: RUF022
    # Models
    "AIQueryResult",
    "ChartSpec",
    "ChatResponse",
    "SchemaContext",
    # Errors
    "AIError",
    "AppError",
    "RateLimitError",
    "UnsafeSqlError",
    "ValidationError",
    # Services
    "ConfigService",
]
