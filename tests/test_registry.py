from __future__ import annotations

import textwrap

import pytest

from ecom_analytics.exceptions.errors import SchemaError
from ecom_analytics.schema.registry import SchemaRegistry


def test_registry_declares_nine_tables(registry):
    assert registry.list_tables() == [
        "customers",
        "locations",
        "order_items",
        "order_payments",
        "order_review",
        "orders",
        "product_category",
        "products",
        "sellers",
    ]
    assert registry.get_table("order_items").primary_key == ["order_id", "product_id", "seller_id"]
    assert registry.get_table("orders").columns["purchase_time"].type == "datetime"
    assert registry.get_table("order_review").columns["review_score"].type == "int"


def test_join_rule_lookup_is_directional(registry):
    rule = registry.join_rule("order_items", "orders")
    assert rule.left_keys == ["order_id"]
    assert rule.join_type == "inner"
    with pytest.raises(SchemaError):
        registry.join_rule("orders", "order_items")


def test_inner_joins_exclude_location_lookups(registry):
    pairs = {(j.left_table, j.right_table) for j in registry.inner_joins()}
    assert ("customers", "locations") not in pairs
    assert ("order_review", "orders") in pairs
    assert len(pairs) == 7


def test_inner_joins_restricted_to_tables(registry):
    pairs = {(j.left_table, j.right_table) for j in registry.inner_joins(["order_items", "products", "sellers"])}
    assert pairs == {("order_items", "products"), ("order_items", "sellers")}


def test_unknown_table_raises(registry):
    with pytest.raises(SchemaError):
        registry.get_table("inventory")


def _write(tmp_path, body: str):
    p = tmp_path / "registry.yaml"
    p.write_text(textwrap.dedent(body), encoding="utf-8")
    return str(p)


def test_missing_registry_file(tmp_path):
    with pytest.raises(SchemaError):
        SchemaRegistry.load(str(tmp_path / "nope.yaml"))


def test_join_to_unknown_table_is_rejected(tmp_path):
    path = _write(tmp_path, """
        tables:
          a:
            columns:
              id: {type: string}
        joins:
          - {left_table: a, right_table: b, left_keys: [id], right_keys: [id]}
    """)
    with pytest.raises(SchemaError, match="unknown table"):
        SchemaRegistry.load(path)


def test_join_key_must_exist(tmp_path):
    path = _write(tmp_path, """
        tables:
          a:
            columns:
              id: {type: string}
          b:
            columns:
              a_id: {type: string}
        joins:
          - {left_table: b, right_table: a, left_keys: [missing], right_keys: [id]}
    """)
    with pytest.raises(SchemaError) as exc:
        SchemaRegistry.load(path)
    assert exc.value.table == "b"
    assert exc.value.column == "missing"


def test_unsupported_column_type(tmp_path):
    path = _write(tmp_path, """
        tables:
          a:
            columns:
              id: {type: uuid}
    """)
    with pytest.raises(SchemaError, match="Unsupported column type"):
        SchemaRegistry.load(path)
