"""System prompt assembly for the NL -> SQL model call.

`build_system_prompt` is pure: the same `SchemaContext` always yields the same
text, so prompts can be snapshot-tested without a model.
"""

from __future__ import annotations

from typing import Final

from store_nl2sql.models import SchemaContext
from store_nl2sql.prompts.examples import format_few_shot_examples

# Bump whenever the rules or response contract change.
PROMPT_VERSION: Final[str] = "2"

PREAMBLE: Final[str] = (
    "You are a WooCommerce analytics assistant. You convert natural language questions "
    "about store data into PostgreSQL SQL queries."
)

SCHEMA_DEFINITION: Final[str] = """You have access to a PostgreSQL database with these tables:

### orders
Columns: id (UUID), store_id (UUID), wc_order_id (INTEGER), date_created (TIMESTAMPTZ), date_modified (TIMESTAMPTZ), status (VARCHAR - processing|completed|refunded|cancelled|pending|on-hold|failed), total (DECIMAL), subtotal (DECIMAL), tax_total (DECIMAL), shipping_total (DECIMAL), discount_total (DECIMAL), currency (VARCHAR), customer_id (UUID), payment_method (VARCHAR), coupon_used (VARCHAR)

### order_items
Columns: id (UUID), order_id (UUID), store_id (UUID), product_id (UUID), product_name (VARCHAR), sku (VARCHAR), quantity (INTEGER), subtotal (DECIMAL), total (DECIMAL)

### products
Columns: id (UUID), store_id (UUID), wc_product_id (INTEGER), name (VARCHAR), sku (VARCHAR), price (DECIMAL), regular_price (DECIMAL), sale_price (DECIMAL), category_id (UUID), category_name (VARCHAR), stock_quantity (INTEGER), stock_status (VARCHAR - instock|outofstock|onbackorder), status (VARCHAR - publish|draft|private), type (VARCHAR - simple|variable|grouped), created_at (TIMESTAMPTZ), updated_at (TIMESTAMPTZ)

### customers
Columns: id (UUID), store_id (UUID), wc_customer_id (INTEGER), display_name (VARCHAR), email_hash (VARCHAR - DO NOT SELECT), total_spent (DECIMAL), order_count (INTEGER), first_order_date (TIMESTAMPTZ), last_order_date (TIMESTAMPTZ), created_at (TIMESTAMPTZ)
Note: email_hash holds SHA-256 hashes for internal use only. NEVER select or return email_hash.

### categories
Columns: id (UUID), store_id (UUID), wc_category_id (INTEGER), name (VARCHAR), parent_id (UUID), product_count (INTEGER)

### coupons
Columns: id (UUID), store_id (UUID), wc_coupon_id (INTEGER), code (VARCHAR), discount_type (VARCHAR), amount (DECIMAL), usage_count (INTEGER)"""

CRITICAL_RULES: Final[str] = """## Critical Rules
1. ALWAYS include `WHERE store_id = $1` in EVERY query for tenant isolation. The store_id value will be provided as parameter $1.
2. Only generate SELECT queries. NEVER use INSERT, UPDATE, DELETE, DROP, ALTER, CREATE, TRUNCATE, GRANT, or REVOKE.
3. Use `LIMIT` on all queries. Default to LIMIT 100 for list queries and LIMIT 1 for aggregate queries. Never exceed LIMIT 1000.
4. For revenue calculations, filter by `status IN ('completed', 'processing')` to exclude cancelled and refunded orders.
5. Use PostgreSQL date functions: DATE_TRUNC, NOW(), INTERVAL for time-based queries.
6. When joining tables, include `store_id = $1` conditions on ALL joined tables.
7. NEVER return raw customer emails or PII. Use display_name for customer identification.
8. Round monetary values to 2 decimal places with ROUND(value, 2).
9. Order results meaningfully (e.g., by revenue DESC, by date ASC).
10. Use table aliases for readability (e.g., o for orders, oi for order_items, p for products)."""

RESPONSE_FORMAT: Final[str] = """## Response Format
You MUST respond with valid JSON in this exact format:
{
  "sql": "SELECT ... FROM ... WHERE store_id = $1 ...",
  "explanation": "Brief explanation of what the query does",
  "chartSpec": {
    "type": "bar|line|pie|doughnut|table",
    "title": "Chart title",
    "xLabel": "X-axis label (for bar/line)",
    "yLabel": "Y-axis label (for bar/line)",
    "dataKey": "column name for data values",
    "labelKey": "column name for labels"
  }
}

Always use $1 as the store_id placeholder. The system will inject the actual value as a query parameter.
Set chartSpec to null for simple aggregate queries that return a single number.
Use "table" type for multi-column result sets that don't suit a chart."""


def _format_date(value: object) -> str:
    isoformat = getattr(value, "isoformat", None)
    return isoformat() if callable(isoformat) else str(value)


def build_metadata_section(ctx: SchemaContext) -> str:
    """Render live store metadata."""
    lines = [
        "## Store Metadata",
        "- Store ID: Provided as query parameter $1. Always use $1 in WHERE clauses.",
        f"- Store currency: {ctx.currency}",
        f"- Total orders: {ctx.total_orders}",
        f"- Total products: {ctx.total_products}",
        f"- Total customers: {ctx.total_customers}",
        f"- Total categories: {ctx.total_categories}",
    ]
    if ctx.earliest_order_date and ctx.latest_order_date:
        lines.append(
            "- Date range available: "
            f"{_format_date(ctx.earliest_order_date)} to {_format_date(ctx.latest_order_date)}"
        )
    else:
        lines.append("- Date range available: No orders yet")
    return "\n".join(lines)


def build_system_prompt(ctx: SchemaContext) -> str:
    """Assemble the full system prompt for one store."""
    sections = [
        PREAMBLE,
        "",
        "## Database Schema",
        SCHEMA_DEFINITION,
        "",
        build_metadata_section(ctx),
        "",
        CRITICAL_RULES,
        "",
        RESPONSE_FORMAT,
        "",
        format_few_shot_examples(),
    ]
    return "\n".join(sections)
