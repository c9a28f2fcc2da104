"""Shared test data: tenant keys, a seeded SQLite store and scripted AI clients."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
import json

import sqlalchemy as sa

from store_nl2sql.context.tables import categories, customers, metadata, orders, products
from store_nl2sql.llm import parse_ai_reply
from store_nl2sql.models import AIReply

STORE_ID = "3f1c9a52-8e0b-4d7a-9c61-2b5e7f4a1d03"
OTHER_STORE_ID = "a7d24e10-5b3c-4f68-8e92-0c1d6b7a9e54"
EMPTY_STORE_ID = "00000000-0000-4000-8000-000000000000"


def make_engine() -> sa.Engine:
    # One shared connection so worker threads see the same in-memory database
    return sa.create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=sa.pool.StaticPool,
        connect_args={"check_same_thread": False},
    )


def seed(engine: sa.Engine) -> None:
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(
            orders.insert(),
            [
                {
                    "id": "o1",
                    "store_id": STORE_ID,
                    "date_created": datetime(2026, 1, 5, 10, 0, tzinfo=UTC),
                    "status": "completed",
                    "total": Decimal("120.50"),
                    "currency": "USD",
                    "customer_id": "c1",
                    "payment_method": "card",
                },
                {
                    "id": "o2",
                    "store_id": STORE_ID,
                    "date_created": datetime(2026, 2, 14, 9, 30, tzinfo=UTC),
                    "status": "processing",
                    "total": Decimal("79.50"),
                    "currency": "EUR",
                    "customer_id": "c2",
                    "payment_method": "paypal",
                },
                {
                    "id": "o3",
                    "store_id": STORE_ID,
                    "date_created": datetime(2026, 2, 20, 18, 45, tzinfo=UTC),
                    "status": "refunded",
                    "total": Decimal("15.00"),
                    "currency": "EUR",
                    "customer_id": "c1",
                    "payment_method": "card",
                },
                {
                    "id": "o4",
                    "store_id": OTHER_STORE_ID,
                    "date_created": datetime(2025, 12, 1, 8, 0, tzinfo=UTC),
                    "status": "completed",
                    "total": Decimal("999.99"),
                    "currency": "GBP",
                    "customer_id": "c9",
                    "payment_method": "card",
                },
            ],
        )
        conn.execute(
            products.insert(),
            [
                {"id": "p1", "store_id": STORE_ID, "name": "Mug", "price": Decimal("12.00"),
                 "category_name": "Kitchen", "stock_status": "instock", "status": "publish"},
                {"id": "p2", "store_id": STORE_ID, "name": "Poster", "price": Decimal("25.00"),
                 "category_name": "Decor", "stock_status": "outofstock", "status": "publish"},
                {"id": "p3", "store_id": OTHER_STORE_ID, "name": "Lamp", "price": Decimal("40.00"),
                 "category_name": "Decor", "stock_status": "instock", "status": "publish"},
            ],
        )
        conn.execute(
            customers.insert(),
            [
                {"id": "c1", "store_id": STORE_ID, "display_name": "Ada",
                 "total_spent": Decimal("135.50"), "order_count": 2},
                {"id": "c2", "store_id": STORE_ID, "display_name": "Grace",
                 "total_spent": Decimal("79.50"), "order_count": 1},
                {"id": "c9", "store_id": OTHER_STORE_ID, "display_name": "Linus",
                 "total_spent": Decimal("999.99"), "order_count": 1},
            ],
        )
        conn.execute(
            categories.insert(),
            [
                {"id": "k1", "store_id": STORE_ID, "name": "Kitchen", "product_count": 1},
                {"id": "k2", "store_id": STORE_ID, "name": "Decor", "product_count": 1},
                {"id": "k3", "store_id": OTHER_STORE_ID, "name": "Decor", "product_count": 1},
            ],
        )


REVENUE_SQL = (
    "SELECT ROUND(SUM(total), 2) AS total_revenue FROM orders "
    "WHERE store_id = $1 AND status IN ('completed', 'processing')"
)


class ScriptedClient:
    """Completion client that replays a fixed model reply."""

    def __init__(self, sql: str = REVENUE_SQL, chart_spec: dict | None = None) -> None:
        self.raw = json.dumps(
            {"sql": sql, "explanation": "Total revenue.", "chartSpec": chart_spec}
        )
        self.prompts: list[tuple[str, str]] = []

    async def complete(self, prompt_text: str, question: str) -> AIReply:
        self.prompts.append((prompt_text, question))
        return parse_ai_reply(self.raw)


class RaisingClient:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def complete(self, prompt_text: str, question: str) -> AIReply:
        raise self.exc
