"""Per-store schema context for the system prompt.

Every read is filtered by the tenant key bound as a parameter. Nothing is
cached: counts and date ranges change as the store syncs, and the prompt should
reflect the store as it is now.
"""

from __future__ import annotations

from datetime import datetime

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from store_nl2sql.context.tables import categories, customers, orders, products
from store_nl2sql.errors import SchemaContextError
from store_nl2sql.models import SchemaContext
from store_nl2sql.tenant import ensure_store_id

_logger = get_logger(__name__)

DEFAULT_CURRENCY = "USD"


def _count(conn: sa.Connection, table: sa.Table, store_id: str) -> int:
    stmt = sa.select(sa.func.count()).select_from(table).where(table.c.store_id == store_id)
    return int(conn.execute(stmt).scalar_one() or 0)


def _as_datetime(value: object) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    # Some drivers hand back aggregates over timestamps as text
    return datetime.fromisoformat(str(value))


class SchemaContextProvider:
    """Computes `SchemaContext` for a store from the analytics tables."""

    def __init__(self, engine: sa.Engine) -> None:
        self.engine = engine

    def get_store_context(self, store_id: str) -> SchemaContext:
        """Read counts, date range and currency for `store_id`.

        Raises:
            ValidationError: If `store_id` is not a canonical UUID (no I/O happens)
            SchemaContextError: If the database reads fail
        """
        ensure_store_id(store_id)

        order_stats = sa.select(
            sa.func.count().label("total_orders"),
            sa.func.min(orders.c.date_created).label("earliest_order_date"),
            sa.func.max(orders.c.date_created).label("latest_order_date"),
        ).where(orders.c.store_id == store_id)
        latest_currency = (
            sa.select(orders.c.currency)
            .where(orders.c.store_id == store_id)
            .order_by(orders.c.date_created.desc())
            .limit(1)
        )

        try:
            with self.engine.connect() as conn:
                stats = conn.execute(order_stats).mappings().one()
                currency = conn.execute(latest_currency).scalar_one_or_none()
                context = SchemaContext(
                    store_id=store_id,
                    currency=currency or DEFAULT_CURRENCY,
                    total_orders=int(stats["total_orders"] or 0),
                    total_products=_count(conn, products, store_id),
                    total_customers=_count(conn, customers, store_id),
                    total_categories=_count(conn, categories, store_id),
                    earliest_order_date=_as_datetime(stats["earliest_order_date"]),
                    latest_order_date=_as_datetime(stats["latest_order_date"]),
                )
        except SQLAlchemyError as exc:
            _logger.warning("Schema context read failed for store %s: %s", store_id, exc)
            msg = f"Failed to fetch schema context for store {store_id}"
            raise SchemaContextError(msg) from exc

        _logger.info(
            "Schema context fetched (store=%s, orders=%d, products=%d)",
            store_id,
            context.total_orders,
            context.total_products,
        )
        return context
