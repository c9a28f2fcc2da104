"""SQLAlchemy Core definitions of the analytics tables.

Only the columns the pipeline reads itself are declared. The full column
catalogue the model sees lives in `store_nl2sql.prompts.system`.
"""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()

# store_id is a UUID column in PostgreSQL. It is declared as a string here so
# the same metadata works against SQLite in tests; values are always bound as
# canonical UUID text.
orders = sa.Table(
    "orders",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column("store_id", sa.String(36), nullable=False, index=True),
    sa.Column("date_created", sa.DateTime(timezone=True), nullable=False),
    sa.Column("status", sa.String(32), nullable=False),
    sa.Column("total", sa.Numeric(12, 2), nullable=False),
    sa.Column("currency", sa.String(8), nullable=False),
    sa.Column("customer_id", sa.String(36)),
    sa.Column("payment_method", sa.String(64)),
)

products = sa.Table(
    "products",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column("store_id", sa.String(36), nullable=False, index=True),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("price", sa.Numeric(12, 2)),
    sa.Column("category_name", sa.String(255)),
    sa.Column("stock_status", sa.String(32)),
    sa.Column("status", sa.String(32)),
)

customers = sa.Table(
    "customers",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column("store_id", sa.String(36), nullable=False, index=True),
    sa.Column("display_name", sa.String(255)),
    sa.Column("total_spent", sa.Numeric(12, 2)),
    sa.Column("order_count", sa.Integer),
)

categories = sa.Table(
    "categories",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column("store_id", sa.String(36), nullable=False, index=True),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("product_count", sa.Integer),
)
