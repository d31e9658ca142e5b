from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
import pandas as pd

from ecom_analytics.schema.registry import SchemaRegistry
from ecom_analytics.preprocessing.cleaning import standardize_columns, coerce_types
from ecom_analytics.exceptions.errors import DataIngestionError, SchemaError
from ecom_analytics.logging.logger import get_logger

log = get_logger("data.session")


@dataclass
class DataSession:
    """The in-memory table set for one analysis run.

    Each registry table is registered exactly once, already typed. Reports only
    read from the session; nothing replaces or edits a table after load.
    """

    registry: SchemaRegistry
    tables: Dict[str, pd.DataFrame] = field(default_factory=dict)
    source_files: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_frames(
        cls,
        registry: SchemaRegistry,
        frames: Mapping[str, pd.DataFrame],
        date_format: Optional[str] = "ISO8601",
    ) -> "DataSession":
        """Build a session from raw frames, typing each one against the registry."""
        session = cls(registry=registry)
        for table, df in frames.items():
            spec = registry.get_table(table)
            typed = coerce_types(standardize_columns(df), spec.column_types(), table=table, date_format=date_format)
            session.register_table(table, typed, source_filename=f"<frame:{table}>")
        return session

    def register_table(self, table_name: str, df: pd.DataFrame, source_filename: str) -> None:
        spec = self.registry.get_table(table_name)
        if table_name in self.tables:
            raise DataIngestionError(
                f"Table '{table_name}' already loaded from {self.source_files[table_name]}; refusing {source_filename}"
            )
        if spec.unique_key and spec.primary_key:
            pk = spec.primary_key
            dup = df.duplicated(subset=pk, keep=False)
            if dup.any():
                keys = sorted(set(df.loc[dup, pk].astype(str).agg("|".join, axis=1)))
                preview = ", ".join(keys[:5]) + (" ..." if len(keys) > 5 else "")
                raise SchemaError(
                    f"Duplicate primary key in {table_name} ({', '.join(pk)}): {preview}",
                    table=table_name,
                    column=pk[0],
                )
        # Only declared columns are kept, in declaration order.
        self.tables[table_name] = df[list(spec.columns.keys())].reset_index(drop=True)
        self.source_files[table_name] = source_filename
        log.info(
            "Registered table",
            extra={"table": table_name, "file": source_filename, "rows_total": len(df)},
        )

    def get_table(self, table_name: str) -> pd.DataFrame:
        if table_name not in self.tables:
            raise SchemaError(f"Table '{table_name}' has not been loaded", table=table_name)
        return self.tables[table_name]

    def available_tables(self) -> List[str]:
        return sorted(self.tables.keys())

    def missing_tables(self) -> List[str]:
        return [t for t in self.registry.list_tables() if t not in self.tables]

    def ensure_tables(self, tables: List[str]) -> None:
        missing = [t for t in tables if t not in self.tables]
        if missing:
            raise SchemaError(f"Required table(s) not loaded: {', '.join(missing)}", table=missing[0])
