from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import pytest

from ecom_analytics.config.settings import Settings
from ecom_analytics.data.session import DataSession
from ecom_analytics.logging import logger
from ecom_analytics.schema.registry import SchemaRegistry

ROOT = Path(__file__).resolve().parents[1]
SCHEMA_PATH = ROOT / "schemas" / "schema_registry.yaml"

AS_OF = datetime(2018, 10, 1)

# Canonical file names used when a test writes the dataset to disk.
FILE_NAMES = {
    "customers": "olist_customers_dataset.csv",
    "orders": "olist_orders_dataset.csv",
    "order_items": "olist_order_items_dataset.csv",
    "products": "olist_products_dataset.csv",
    "product_category": "product_category_name_translation.csv",
    "sellers": "olist_sellers_dataset.csv",
    "locations": "olist_geolocation_dataset.csv",
    "order_payments": "olist_order_payments_dataset.csv",
    "order_review": "olist_order_reviews_dataset.csv",
}


def base_frames() -> Dict[str, pd.DataFrame]:
    """A small dataset where every reference resolves.

    Revenue: Sao Paulo 415.50, Rio de Janeiro 30.00; computers_accessories
    225.50, bed_bath_table 140.00, health_beauty 80.00. P4 is never ordered.
    """
    return {
        "customers": pd.DataFrame(
            [
                ("C1", "U1", "01001", "Sao Paulo", "SP"),
                ("C2", "U2", "20000", "Rio de Janeiro", "RJ"),
                ("C3", "U3", "01002", "Sao Paulo", "SP"),
            ],
            columns=["customer_id", "customer_unique_id", "zip_code", "city", "state"],
        ),
        "orders": pd.DataFrame(
            [
                ("O1", "C1", "delivered", "2018-01-05 10:00:00", "2018-01-05 11:00:00", "2018-01-07 09:00:00", "2018-01-12 15:00:00", "2018-01-20 00:00:00"),
                ("O2", "C2", "delivered", "2018-01-20 08:30:00", "2018-01-20 09:00:00", "2018-01-22 09:00:00", "2018-01-28 12:00:00", "2018-02-05 00:00:00"),
                ("O3", "C3", "delivered", "2018-03-02 14:00:00", "2018-03-02 15:00:00", "2018-03-04 10:00:00", "2018-03-10 16:00:00", "2018-03-20 00:00:00"),
                ("O4", "C1", "shipped", "2018-09-15 19:45:00", "2018-09-15 20:00:00", "2018-09-17 08:00:00", None, "2018-10-05 00:00:00"),
                ("O5", "C3", "created", None, None, None, None, None),
            ],
            columns=[
                "order_id", "customer_id", "status", "purchase_time", "approved_time",
                "delivered_carrier_date", "delivered_customer_date", "estimated_delivery_date",
            ],
        ),
        "order_items": pd.DataFrame(
            [
                ("O1", "P1", "S1", 100.00, 10.00, "2018-01-09 10:00:00"),
                ("O1", "P2", "S2", 50.00, 8.00, "2018-01-09 10:00:00"),
                ("O2", "P2", "S2", 30.00, 5.00, "2018-01-24 08:30:00"),
                ("O3", "P3", "S1", 200.00, 20.00, "2018-03-06 14:00:00"),
                ("O4", "P1", "S1", 40.00, 7.50, "2018-09-19 19:45:00"),
                ("O4", "P5", "S2", 25.50, 7.50, "2018-09-19 19:45:00"),
            ],
            columns=["order_id", "product_id", "seller_id", "price", "freight_value", "order_date"],
        ),
        "products": pd.DataFrame(
            [
                ("P1", "cama_mesa_banho"),
                ("P2", "beleza_saude"),
                ("P3", "informatica_acessorios"),
                ("P4", "beleza_saude"),
                ("P5", "informatica_acessorios"),
            ],
            columns=["product_id", "product_category_name"],
        ),
        "product_category": pd.DataFrame(
            [
                ("cama_mesa_banho", "bed_bath_table"),
                ("beleza_saude", "health_beauty"),
                ("informatica_acessorios", "computers_accessories"),
            ],
            columns=["product_category_name", "product_category_eng"],
        ),
        "sellers": pd.DataFrame(
            [
                ("S1", "13000", "campinas", "SP"),
                ("S2", "30000", "belo horizonte", "MG"),
            ],
            columns=["seller_id", "zip_code", "city", "state"],
        ),
        "locations": pd.DataFrame(
            [
                ("01001", "Sao Paulo", "SP"),
                ("01002", "Sao Paulo", "SP"),
                ("20000", "Rio de Janeiro", "RJ"),
                ("13000", "campinas", "SP"),
                ("30000", "belo horizonte", "MG"),
            ],
            columns=["zip_code", "city", "state"],
        ),
        "order_payments": pd.DataFrame(
            [
                ("O1", "credit_card", 168.00),
                ("O2", "boleto", 35.00),
                ("O3", "credit_card", 220.00),
                ("O4", "voucher", 80.50),
            ],
            columns=["order_id", "payment_type", "payment_value"],
        ),
        "order_review": pd.DataFrame(
            [
                ("R1", "O1", 5, "2018-01-13 00:00:00", "2018-01-14 10:00:00"),
                ("R2", "O2", 3, "2018-01-29 00:00:00", "2018-01-30 10:00:00"),
                ("R3", "O3", 4, "2018-03-11 00:00:00", "2018-03-12 10:00:00"),
                ("R4", "O4", 2, "2018-09-30 00:00:00", None),
            ],
            columns=["review_id", "order_id", "review_score", "creation_date", "answer_date"],
        ),
    }


def append_rows(frames: Dict[str, pd.DataFrame], table: str, rows: list) -> Dict[str, pd.DataFrame]:
    out = dict(frames)
    extra = pd.DataFrame(rows, columns=frames[table].columns)
    out[table] = pd.concat([frames[table], extra], ignore_index=True)
    return out


def write_csvs(frames: Dict[str, pd.DataFrame], directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for table, df in frames.items():
        df.to_csv(directory / FILE_NAMES[table], index=False)
    return directory


def make_settings(data_dir: Path, **overrides) -> Settings:
    values = dict(
        env="test",
        log_level="DEBUG",
        log_file=None,
        data_dir=str(data_dir),
        schema_path=str(SCHEMA_PATH),
        delimiter=",",
        fallback_encodings=["utf-8", "latin-1"],
        skip_bad_lines=False,
        date_format="ISO8601",
        strict_references=True,
        stale_months=6,
        export_dir=str(data_dir / "exports"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(autouse=True)
def no_log_handlers(monkeypatch):
    # Leave records to pytest's capture instead of attaching stream/file handlers.
    monkeypatch.setattr(logger, "_INITIALIZED", True)


@pytest.fixture(scope="session")
def registry() -> SchemaRegistry:
    return SchemaRegistry.load(str(SCHEMA_PATH))


@pytest.fixture
def frames() -> Dict[str, pd.DataFrame]:
    return base_frames()


@pytest.fixture
def session(registry, frames) -> DataSession:
    return DataSession.from_frames(registry, frames)


@pytest.fixture
def make_session(registry):
    def _make(frames: Optional[Dict[str, pd.DataFrame]] = None) -> DataSession:
        return DataSession.from_frames(registry, frames if frames is not None else base_frames())
    return _make
