from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ecom_analytics.schema.registry import JoinRule


@dataclass(frozen=True)
class SqlDialect:
    """Identifier quoting for generated SQL."""

    ident_quote: str = '"'

    def ident(self, name: str) -> str:
        q = self.ident_quote
        return q + name.replace(q, q + q) + q


DUCKDB = SqlDialect()


def join_condition(rule: JoinRule, left_alias: str, right_alias: str, dialect: SqlDialect = DUCKDB) -> str:
    conds: List[str] = []
    for lk, rk in zip(rule.left_keys, rule.right_keys):
        conds.append(f"{left_alias}.{dialect.ident(lk)} = {right_alias}.{dialect.ident(rk)}")
    return " AND ".join(conds)


def unresolved_keys_sql(rule: JoinRule, dialect: SqlDialect = DUCKDB) -> str:
    """SQL listing distinct referencing keys of ``rule`` with no referenced row.

    Rows whose key is partly null are not references and are skipped.
    """
    lt, rt = dialect.ident(rule.left_table), dialect.ident(rule.right_table)
    keys = ", ".join(f"l.{dialect.ident(k)}" for k in rule.left_keys)
    not_null = " AND ".join(f"l.{dialect.ident(k)} IS NOT NULL" for k in rule.left_keys)
    match_col = dialect.ident(rule.right_keys[0])
    return (
        f"SELECT DISTINCT {keys} FROM {lt} AS l "
        f"LEFT JOIN {rt} AS r ON {join_condition(rule, 'l', 'r', dialect)} "
        f"WHERE {not_null} AND r.{match_col} IS NULL "
        f"ORDER BY {keys}"
    )
