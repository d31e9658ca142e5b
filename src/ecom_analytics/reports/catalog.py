from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pandas as pd

from ecom_analytics.exceptions.errors import ReportError

# Revenue is summed as DECIMAL so that totals do not depend on grouping order.
_REVENUE = "SUM(CAST(oi.price AS DECIMAL(18, 2)))"

# customers may repeat a customer_id (see duplicate_customers); keep one row per id
_CUSTOMERS = """(
    SELECT customer_id, customer_unique_id, zip_code, city, state
    FROM (
        SELECT *, ROW_NUMBER() OVER (
            PARTITION BY customer_id
            ORDER BY customer_unique_id ASC NULLS LAST, zip_code ASC NULLS LAST, city ASC NULLS LAST
        ) AS rn
        FROM customers
    ) AS ranked_customers
    WHERE rn = 1
)"""

_CATEGORY_REVENUE = f"""
SELECT pc.product_category_eng AS category, {_REVENUE} AS total_sales
FROM orders AS o
JOIN order_items AS oi ON oi.order_id = o.order_id
JOIN {_CUSTOMERS} AS c ON c.customer_id = o.customer_id
JOIN products AS p ON p.product_id = oi.product_id
JOIN product_category AS pc ON pc.product_category_name = p.product_category_name
GROUP BY pc.product_category_eng
"""

_REVIEWED_PRODUCTS = """
FROM products AS p
JOIN order_items AS oi ON oi.product_id = p.product_id
JOIN order_review AS r ON r.order_id = oi.order_id
JOIN product_category AS pc ON pc.product_category_name = p.product_category_name
"""


def _stale_params(as_of: datetime, stale_months: int) -> List[Any]:
    cutoff = pd.Timestamp(as_of) - pd.DateOffset(months=stale_months)
    return [cutoff.to_pydatetime()]


@dataclass(frozen=True)
class ReportDefinition:
    number: int
    name: str
    title: str
    description: str
    sql: str
    tables: List[str]
    # Foreign keys (referencing, referenced) the query inner-joins on
    references: List[Tuple[str, str]] = field(default_factory=list)
    params: Optional[Callable[[datetime, int], List[Any]]] = None


REPORTS: List[ReportDefinition] = [
    ReportDefinition(
        number=1,
        name="duplicate_customers",
        title="Duplicate customers",
        description="Customer rows whose customer_id appears more than once, with their location.",
        sql="""
SELECT c.customer_id, c.customer_unique_id, c.zip_code, c.city, c.state
FROM customers AS c
WHERE c.customer_id IN (
    SELECT customer_id FROM customers
    WHERE customer_id IS NOT NULL
    GROUP BY customer_id
    HAVING COUNT(*) > 1
)
ORDER BY c.customer_id, c.customer_unique_id, c.zip_code
""",
        tables=["customers"],
    ),
    ReportDefinition(
        number=2,
        name="sales_by_city",
        title="Total sales by city",
        description="Item revenue (excluding freight) summed by the city of the ordering customer.",
        sql=f"""
SELECT c.city AS city, {_REVENUE} AS total_sales
FROM orders AS o
JOIN order_items AS oi ON oi.order_id = o.order_id
JOIN {_CUSTOMERS} AS c ON c.customer_id = o.customer_id
JOIN products AS p ON p.product_id = oi.product_id
GROUP BY c.city
ORDER BY total_sales DESC, city ASC
""",
        tables=["orders", "order_items", "customers", "products"],
        references=[("order_items", "orders"), ("orders", "customers"), ("order_items", "products")],
    ),
    ReportDefinition(
        number=3,
        name="sales_by_category",
        title="Total sales by category",
        description="Item revenue summed by English product category.",
        sql=f"""
{_CATEGORY_REVENUE}
ORDER BY total_sales DESC, category ASC
""",
        tables=["orders", "order_items", "customers", "products", "product_category"],
        references=[
            ("order_items", "orders"),
            ("orders", "customers"),
            ("order_items", "products"),
            ("products", "product_category"),
        ],
    ),
    ReportDefinition(
        number=4,
        name="category_revenue_extremes",
        title="Category revenue extremes",
        description="The lowest- and highest-revenue categories; ties go to the alphabetically first category.",
        sql=f"""
WITH revenue AS ({_CATEGORY_REVENUE}),
ranked AS (
    SELECT category, total_sales,
           ROW_NUMBER() OVER (ORDER BY total_sales ASC, category ASC NULLS LAST) AS lo,
           ROW_NUMBER() OVER (ORDER BY total_sales DESC, category ASC NULLS LAST) AS hi
    FROM revenue
)
SELECT extreme, category, total_sales FROM (
    SELECT 0 AS pos, 'min' AS extreme, category, total_sales FROM ranked WHERE lo = 1
    UNION ALL
    SELECT 1 AS pos, 'max' AS extreme, category, total_sales FROM ranked WHERE hi = 1
) AS t
ORDER BY pos
""",
        tables=["orders", "order_items", "customers", "products", "product_category"],
        references=[
            ("order_items", "orders"),
            ("orders", "customers"),
            ("order_items", "products"),
            ("products", "product_category"),
        ],
    ),
    ReportDefinition(
        number=5,
        name="orders_by_month",
        title="Orders by month",
        description="Number of orders per calendar month of purchase, busiest month first.",
        sql="""
SELECT year(o.purchase_time) AS "year",
       month(o.purchase_time) AS "month",
       monthname(o.purchase_time) AS month_name,
       COUNT(o.order_id) AS order_count
FROM orders AS o
WHERE o.purchase_time IS NOT NULL
GROUP BY 1, 2, 3
ORDER BY order_count DESC, "year" ASC, "month" ASC
""",
        tables=["orders"],
    ),
    ReportDefinition(
        number=6,
        name="avg_review_by_category",
        title="Average review score per category",
        description="Mean review score of orders containing the category's products, rounded to 2 places.",
        sql=f"""
SELECT pc.product_category_eng AS category,
       ROUND(AVG(r.review_score), 2) AS avg_review_score,
       COUNT(r.review_score) AS review_count
{_REVIEWED_PRODUCTS}
GROUP BY pc.product_category_eng
ORDER BY avg_review_score DESC NULLS LAST, category ASC
""",
        tables=["products", "order_items", "order_review", "product_category"],
        references=[("order_items", "products"), ("products", "product_category")],
    ),
    ReportDefinition(
        number=7,
        name="top_product_by_category",
        title="Top-reviewed product per category",
        description="Highest review score within each category; ties go to the lowest product_id.",
        sql=f"""
WITH scored AS (
    SELECT pc.product_category_eng AS category, p.product_id, r.review_score,
           ROW_NUMBER() OVER (
               PARTITION BY pc.product_category_eng
               ORDER BY r.review_score DESC, p.product_id ASC
           ) AS rnk
    {_REVIEWED_PRODUCTS}
    WHERE r.review_score IS NOT NULL
)
SELECT category, product_id, review_score
FROM scored
WHERE rnk = 1
ORDER BY category ASC
""",
        tables=["products", "order_items", "order_review", "product_category"],
        references=[("order_items", "products"), ("products", "product_category")],
    ),
    ReportDefinition(
        number=8,
        name="top_sellers",
        title="Top sellers",
        description="Sellers ranked by number of order items sold.",
        sql="""
SELECT oi.seller_id, s.city, s.state, COUNT(*) AS item_count
FROM order_items AS oi
JOIN sellers AS s ON s.seller_id = oi.seller_id
GROUP BY oi.seller_id, s.city, s.state
ORDER BY item_count DESC, oi.seller_id ASC
""",
        tables=["order_items", "sellers"],
        references=[("order_items", "sellers")],
    ),
    ReportDefinition(
        number=9,
        name="top_sellers_by_category",
        title="Top sellers by category",
        description="Order items sold per (seller, category) pair.",
        sql="""
SELECT oi.seller_id, pc.product_category_eng AS category, COUNT(*) AS item_count
FROM order_items AS oi
JOIN products AS p ON p.product_id = oi.product_id
JOIN product_category AS pc ON pc.product_category_name = p.product_category_name
GROUP BY oi.seller_id, pc.product_category_eng
ORDER BY item_count DESC, oi.seller_id ASC, category ASC
""",
        tables=["order_items", "products", "product_category"],
        references=[("order_items", "products"), ("products", "product_category")],
    ),
    ReportDefinition(
        number=10,
        name="stale_products",
        title="Stale products",
        description="Products never ordered, or whose latest order is older than the stale window.",
        sql="""
SELECT p.product_id, pc.product_category_eng AS category, MAX(o.purchase_time) AS last_order_date
FROM products AS p
LEFT JOIN product_category AS pc ON pc.product_category_name = p.product_category_name
LEFT JOIN order_items AS oi ON oi.product_id = p.product_id
LEFT JOIN orders AS o ON o.order_id = oi.order_id
GROUP BY p.product_id, pc.product_category_eng
HAVING MAX(o.purchase_time) IS NULL OR MAX(o.purchase_time) < ?
ORDER BY category ASC NULLS LAST, last_order_date ASC NULLS FIRST, p.product_id ASC
""",
        tables=["products", "product_category", "order_items", "orders"],
        params=_stale_params,
    ),
]

_BY_NAME: Dict[str, ReportDefinition] = {r.name: r for r in REPORTS}
_BY_NUMBER: Dict[int, ReportDefinition] = {r.number: r for r in REPORTS}


def list_reports() -> List[ReportDefinition]:
    return list(REPORTS)


def get_report(key: Union[int, str]) -> ReportDefinition:
    """Look a report up by number (``3`` or ``"3"``) or by name."""
    if isinstance(key, int):
        rep = _BY_NUMBER.get(key)
    else:
        k = key.strip().lower()
        rep = _BY_NUMBER.get(int(k)) if k.isdigit() else _BY_NAME.get(k)
    if rep is None:
        raise ReportError(f"Unknown report: {key!r}")
    return rep
