"""Few-shot question -> SQL pairs for the system prompt.

Every example binds the tenant key as $1, is SELECT-only and carries a LIMIT,
so each one passes the sandbox unchanged. Tests enforce this.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ExampleCategory = Literal["revenue", "product", "customer", "order"]

_REVENUE_STATUSES = "status IN ('completed', 'processing')"


@dataclass(frozen=True, slots=True)
class FewShotExample:
    """One worked example shown to the model."""

    category: ExampleCategory
    question: str
    sql: str
    explanation: str


_EXAMPLES: tuple[FewShotExample, ...] = (
    # -- revenue ----------------------------------------------------------
    FewShotExample(
        category="revenue",
        question="What is my total revenue?",
        sql=(
            "SELECT ROUND(SUM(total), 2) AS total_revenue FROM orders "
            f"WHERE store_id = $1 AND {_REVENUE_STATUSES} LIMIT 1"
        ),
        explanation="Sums the total column for completed and processing orders.",
    ),
    FewShotExample(
        category="revenue",
        question="What was my revenue last month?",
        sql=(
            "SELECT ROUND(SUM(total), 2) AS monthly_revenue FROM orders "
            f"WHERE store_id = $1 AND {_REVENUE_STATUSES} "
            "AND date_created >= DATE_TRUNC('month', NOW()) - INTERVAL '1 month' "
            "AND date_created < DATE_TRUNC('month', NOW()) LIMIT 1"
        ),
        explanation="Sums revenue for the previous calendar month using DATE_TRUNC boundaries.",
    ),
    FewShotExample(
        category="revenue",
        question="Show me daily revenue for the last 7 days",
        sql=(
            "SELECT DATE(date_created) AS day, ROUND(SUM(total), 2) AS daily_revenue "
            f"FROM orders WHERE store_id = $1 AND {_REVENUE_STATUSES} "
            "AND date_created >= NOW() - INTERVAL '7 days' "
            "GROUP BY DATE(date_created) ORDER BY day ASC LIMIT 7"
        ),
        explanation="Groups revenue by day for the last 7 days, ordered chronologically.",
    ),
    FewShotExample(
        category="revenue",
        question="What is my average order value?",
        sql=(
            "SELECT ROUND(AVG(total), 2) AS avg_order_value FROM orders "
            f"WHERE store_id = $1 AND {_REVENUE_STATUSES} LIMIT 1"
        ),
        explanation="Averages the order total across completed and processing orders.",
    ),
    FewShotExample(
        category="revenue",
        question="Show my monthly revenue trend for this year",
        sql=(
            "SELECT TO_CHAR(DATE_TRUNC('month', date_created), 'YYYY-MM') AS month, "
            "ROUND(SUM(total), 2) AS revenue FROM orders "
            f"WHERE store_id = $1 AND {_REVENUE_STATUSES} "
            "AND date_created >= DATE_TRUNC('year', NOW()) "
            "GROUP BY 1 ORDER BY 1 ASC LIMIT 12"
        ),
        explanation="Buckets this year's revenue by calendar month.",
    ),
    FewShotExample(
        category="revenue",
        question="How much revenue came from each payment method?",
        sql=(
            "SELECT payment_method, ROUND(SUM(total), 2) AS revenue FROM orders "
            f"WHERE store_id = $1 AND {_REVENUE_STATUSES} AND payment_method IS NOT NULL "
            "GROUP BY payment_method ORDER BY revenue DESC LIMIT 10"
        ),
        explanation="Splits revenue by the payment method used on each order.",
    ),
    FewShotExample(
        category="revenue",
        question="How much have I refunded?",
        sql=(
            "SELECT COUNT(*) AS refunded_orders, ROUND(SUM(total), 2) AS refunded_amount "
            "FROM orders WHERE store_id = $1 AND status = 'refunded' LIMIT 1"
        ),
        explanation="Counts refunded orders and sums their totals.",
    ),
    # -- product ----------------------------------------------------------
    FewShotExample(
        category="product",
        question="What are my top 10 selling products?",
        sql=(
            "SELECT p.name, SUM(oi.quantity) AS total_sold, ROUND(SUM(oi.total), 2) AS "
            "total_revenue FROM order_items oi "
            "JOIN products p ON oi.product_id = p.id AND p.store_id = $1 "
            "JOIN orders o ON oi.order_id = o.id AND o.store_id = $1 "
            "WHERE oi.store_id = $1 AND o.status IN ('completed', 'processing') "
            "GROUP BY p.name ORDER BY total_sold DESC LIMIT 10"
        ),
        explanation="Joins order items with products to rank top sellers by quantity.",
    ),
    FewShotExample(
        category="product",
        question="Which product categories generate the most revenue?",
        sql=(
            "SELECT p.category_name, ROUND(SUM(oi.total), 2) AS category_revenue "
            "FROM order_items oi "
            "JOIN products p ON oi.product_id = p.id AND p.store_id = $1 "
            "JOIN orders o ON oi.order_id = o.id AND o.store_id = $1 "
            "WHERE oi.store_id = $1 AND o.status IN ('completed', 'processing') "
            "AND p.category_name IS NOT NULL "
            "GROUP BY p.category_name ORDER BY category_revenue DESC LIMIT 20"
        ),
        explanation="Groups order item revenue by product category for paid orders.",
    ),
    FewShotExample(
        category="product",
        question="How many products do I have in stock?",
        sql=(
            "SELECT COUNT(*) AS in_stock_count FROM products "
            "WHERE store_id = $1 AND stock_status = 'instock' AND status = 'publish' LIMIT 1"
        ),
        explanation="Counts published products with an instock status.",
    ),
    FewShotExample(
        category="product",
        question="Which products are out of stock?",
        sql=(
            "SELECT name, sku, stock_quantity FROM products "
            "WHERE store_id = $1 AND stock_status = 'outofstock' ORDER BY name ASC LIMIT 100"
        ),
        explanation="Lists products whose stock status is outofstock.",
    ),
    FewShotExample(
        category="product",
        question="What were my best products by revenue in the last 30 days?",
        sql=(
            "SELECT oi.product_name, ROUND(SUM(oi.total), 2) AS revenue FROM order_items oi "
            "JOIN orders o ON oi.order_id = o.id AND o.store_id = $1 "
            "WHERE oi.store_id = $1 AND o.status IN ('completed', 'processing') "
            "AND o.date_created >= NOW() - INTERVAL '30 days' "
            "GROUP BY oi.product_name ORDER BY revenue DESC LIMIT 10"
        ),
        explanation="Ranks products by order item revenue over the last 30 days.",
    ),
    FewShotExample(
        category="product",
        question="What is the average product price in each category?",
        sql=(
            "SELECT category_name, ROUND(AVG(price), 2) AS avg_price FROM products "
            "WHERE store_id = $1 AND category_name IS NOT NULL "
            "GROUP BY category_name ORDER BY avg_price DESC LIMIT 20"
        ),
        explanation="Averages list prices per category.",
    ),
    # -- customer ---------------------------------------------------------
    FewShotExample(
        category="customer",
        question="How many new vs returning customers do I have?",
        sql=(
            "SELECT CASE WHEN order_count = 1 THEN 'New' ELSE 'Returning' END AS "
            "customer_type, COUNT(*) AS customer_count FROM customers "
            "WHERE store_id = $1 AND order_count > 0 GROUP BY customer_type LIMIT 2"
        ),
        explanation="Classifies customers as New (one order) or Returning (two or more).",
    ),
    FewShotExample(
        category="customer",
        question="Who are my top 10 customers by spending?",
        sql=(
            "SELECT display_name, ROUND(total_spent, 2) AS total_spent, order_count "
            "FROM customers WHERE store_id = $1 AND order_count > 0 "
            "ORDER BY total_spent DESC LIMIT 10"
        ),
        explanation="Lists customers by lifetime spend, identified by display name only.",
    ),
    FewShotExample(
        category="customer",
        question="How many customers placed their first order this month?",
        sql=(
            "SELECT COUNT(*) AS new_customers FROM customers "
            "WHERE store_id = $1 AND first_order_date >= DATE_TRUNC('month', NOW()) LIMIT 1"
        ),
        explanation="Counts customers whose first order falls in the current month.",
    ),
    FewShotExample(
        category="customer",
        question="What is the average lifetime value of a customer?",
        sql=(
            "SELECT ROUND(AVG(total_spent), 2) AS avg_customer_value FROM customers "
            "WHERE store_id = $1 AND order_count > 0 LIMIT 1"
        ),
        explanation="Averages total spend across customers with at least one order.",
    ),
    FewShotExample(
        category="customer",
        question="How many customers haven't ordered in 90 days?",
        sql=(
            "SELECT COUNT(*) AS inactive_customers FROM customers "
            "WHERE store_id = $1 AND last_order_date < NOW() - INTERVAL '90 days' LIMIT 1"
        ),
        explanation="Counts customers whose most recent order is older than 90 days.",
    ),
    FewShotExample(
        category="customer",
        question="How many new customers did I get each month for the last 6 months?",
        sql=(
            "SELECT TO_CHAR(DATE_TRUNC('month', first_order_date), 'YYYY-MM') AS month, "
            "COUNT(*) AS new_customers FROM customers "
            "WHERE store_id = $1 AND first_order_date >= NOW() - INTERVAL '6 months' "
            "GROUP BY 1 ORDER BY 1 ASC LIMIT 6"
        ),
        explanation="Buckets customers by the month of their first order.",
    ),
    # -- order ------------------------------------------------------------
    FewShotExample(
        category="order",
        question="How many orders did I get today?",
        sql=(
            "SELECT COUNT(*) AS order_count FROM orders "
            "WHERE store_id = $1 AND date_created >= DATE_TRUNC('day', NOW()) LIMIT 1"
        ),
        explanation="Counts orders created since the start of today (UTC).",
    ),
    FewShotExample(
        category="order",
        question="What is the breakdown of orders by status?",
        sql=(
            "SELECT status, COUNT(*) AS order_count FROM orders WHERE store_id = $1 "
            "GROUP BY status ORDER BY order_count DESC LIMIT 100"
        ),
        explanation="Groups all orders by status.",
    ),
    FewShotExample(
        category="order",
        question="Which payment methods are most popular?",
        sql=(
            "SELECT payment_method, COUNT(*) AS usage_count FROM orders "
            "WHERE store_id = $1 AND payment_method IS NOT NULL "
            "GROUP BY payment_method ORDER BY usage_count DESC LIMIT 10"
        ),
        explanation="Counts orders by payment method, excluding nulls.",
    ),
    FewShotExample(
        category="order",
        question="Which day of the week gets the most orders?",
        sql=(
            "SELECT EXTRACT(DOW FROM date_created) AS day_of_week, COUNT(*) AS order_count "
            "FROM orders WHERE store_id = $1 AND date_created >= NOW() - INTERVAL '90 days' "
            "GROUP BY day_of_week ORDER BY day_of_week ASC LIMIT 7"
        ),
        explanation="Counts the last 90 days of orders by day of week (0 = Sunday).",
    ),
    FewShotExample(
        category="order",
        question="Which coupons are used the most?",
        sql=(
            "SELECT c.code, c.usage_count FROM coupons c WHERE c.store_id = $1 "
            "ORDER BY c.usage_count DESC LIMIT 10"
        ),
        explanation="Ranks coupons by how many times they have been redeemed.",
    ),
    FewShotExample(
        category="order",
        question="How many items are in an average order?",
        sql=(
            "SELECT ROUND(SUM(oi.quantity)::numeric / NULLIF(COUNT(DISTINCT oi.order_id), 0), 2) "
            "AS avg_items_per_order FROM order_items oi WHERE oi.store_id = $1 LIMIT 1"
        ),
        explanation="Divides total units sold by the number of distinct orders.",
    ),
)


def get_few_shot_examples() -> tuple[FewShotExample, ...]:
    """Return the example library in prompt order."""
    return _EXAMPLES


def format_few_shot_examples() -> str:
    """Render the examples as a numbered prompt section."""
    lines: list[str] = ["## Example Questions and SQL"]
    for i, ex in enumerate(_EXAMPLES, start=1):
        lines.append("")
        lines.append(f'{i}. [{ex.category}] Q: "{ex.question}"')
        lines.append(f"SQL: {ex.sql}")
        lines.append(f"Explanation: {ex.explanation}")
    return "\n".join(lines)
