from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ecom_analytics.exceptions.errors import SchemaError
from ecom_analytics.logging.logger import get_logger

log = get_logger("schema.registry")

SUPPORTED_TYPES = {"string", "float", "int", "datetime"}
JOIN_TYPES = {"inner", "left"}


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    type: str
    description: str = ""


@dataclass(frozen=True)
class TableSpec:
    name: str
    file_patterns: List[str]
    description: str
    primary_key: List[str]
    columns: Dict[str, ColumnSpec]
    # duplicate primary keys are rejected on load
    unique_key: bool = False

    def column_types(self) -> Dict[str, str]:
        return {c: spec.type for c, spec in self.columns.items()}


@dataclass(frozen=True)
class JoinRule:
    """Foreign key from ``left_table`` (referencing) to ``right_table`` (referenced)."""

    left_table: str
    right_table: str
    left_keys: List[str]
    right_keys: List[str]
    join_type: str = "inner"

    def describe(self) -> str:
        lk = ", ".join(self.left_keys)
        rk = ", ".join(self.right_keys)
        return f"{self.left_table}({lk}) -> {self.right_table}({rk}) [{self.join_type}]"


class SchemaRegistry:
    def __init__(self, tables: Dict[str, TableSpec], joins: List[JoinRule], version: int = 1):
        self.version = version
        self.tables = tables
        self.joins = joins
        self._by_pair: Dict[tuple, JoinRule] = {(j.left_table, j.right_table): j for j in joins}

    @staticmethod
    def load(path: str = "schemas/schema_registry.yaml") -> "SchemaRegistry":
        p = Path(path)
        if not p.exists():
            raise SchemaError(f"Schema registry not found: {p}")
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        version = int(raw.get("version", 1))

        tables: Dict[str, TableSpec] = {}
        for tname, tval in (raw.get("tables") or {}).items():
            cols: Dict[str, ColumnSpec] = {}
            for cname, cval in (tval.get("columns") or {}).items():
                cval = cval or {}
                cols[cname] = ColumnSpec(
                    name=cname,
                    type=str(cval.get("type", "string")),
                    description=str(cval.get("description", "")),
                )

            patterns = tval.get("file_patterns", []) or []
            if isinstance(patterns, str):
                patterns = [patterns]

            tables[tname] = TableSpec(
                name=tname,
                file_patterns=[str(x) for x in patterns],
                description=str(tval.get("description", "")),
                primary_key=list(tval.get("primary_key", [])),
                columns=cols,
                unique_key=bool(tval.get("unique_key", False)),
            )

        joins: List[JoinRule] = []
        for j in raw.get("joins", []) or []:
            joins.append(
                JoinRule(
                    left_table=j["left_table"],
                    right_table=j["right_table"],
                    left_keys=list(j["left_keys"]),
                    right_keys=list(j["right_keys"]),
                    join_type=j.get("join_type", "inner"),
                )
            )

        reg = SchemaRegistry(tables=tables, joins=joins, version=version)
        reg.validate()
        return reg

    def validate(self) -> None:
        if not self.tables:
            raise SchemaError("Schema registry has no tables.")
        for t in self.tables.values():
            for c in t.columns.values():
                if c.type not in SUPPORTED_TYPES:
                    raise SchemaError(f"Unsupported column type '{c.type}'", table=t.name, column=c.name)
            for k in t.primary_key:
                if k not in t.columns:
                    raise SchemaError(f"Primary key column missing in {t.name}: {k}", table=t.name, column=k)
        for j in self.joins:
            if j.left_table not in self.tables or j.right_table not in self.tables:
                raise SchemaError(f"Join references unknown table: {j.describe()}")
            if j.join_type not in JOIN_TYPES:
                raise SchemaError(f"Unsupported join type: {j.describe()}")
            if len(j.left_keys) != len(j.right_keys) or not j.left_keys:
                raise SchemaError(f"Join key arity mismatch: {j.describe()}")
            lt = self.tables[j.left_table]
            rt = self.tables[j.right_table]
            for k in j.left_keys:
                if k not in lt.columns:
                    raise SchemaError(f"Join key missing in {lt.name}: {k}", table=lt.name, column=k)
            for k in j.right_keys:
                if k not in rt.columns:
                    raise SchemaError(f"Join key missing in {rt.name}: {k}", table=rt.name, column=k)
        log.info("Schema registry validated", extra={"tables": len(self.tables), "joins": len(self.joins)})

    def list_tables(self) -> List[str]:
        return sorted(self.tables.keys())

    def get_table(self, table: str) -> TableSpec:
        self._ensure_table(table)
        return self.tables[table]

    def join_rule(self, left_table: str, right_table: str) -> JoinRule:
        """Return the declared foreign key from ``left_table`` to ``right_table``."""
        rule = self._by_pair.get((left_table, right_table))
        if rule is None:
            raise SchemaError(f"No join rule declared from {left_table} to {right_table}")
        return rule

    def inner_joins(self, tables: Optional[List[str]] = None) -> List[JoinRule]:
        pool = set(tables) if tables is not None else None
        return [
            j for j in self.joins
            if j.join_type == "inner" and (pool is None or (j.left_table in pool and j.right_table in pool))
        ]

    def _ensure_table(self, table: str) -> None:
        if table not in self.tables:
            raise SchemaError(f"Unknown table: {table}", table=table)
