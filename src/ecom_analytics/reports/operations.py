"""One function per catalog report.

Each takes the loaded session plus the runner options (``strict``,
``stale_months``, ``as_of``) and returns the ordered result frame.
"""
from __future__ import annotations

import pandas as pd

from ecom_analytics.data.session import DataSession
from ecom_analytics.reports.runner import run_report


def duplicate_customers(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "duplicate_customers", **kwargs).df


def sales_by_city(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "sales_by_city", **kwargs).df


def sales_by_category(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "sales_by_category", **kwargs).df


def category_revenue_extremes(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "category_revenue_extremes", **kwargs).df


def orders_by_month(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "orders_by_month", **kwargs).df


def avg_review_by_category(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "avg_review_by_category", **kwargs).df


def top_product_by_category(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "top_product_by_category", **kwargs).df


def top_sellers(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "top_sellers", **kwargs).df


def top_sellers_by_category(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "top_sellers_by_category", **kwargs).df


def stale_products(session: DataSession, **kwargs) -> pd.DataFrame:
    return run_report(session, "stale_products", **kwargs).df
