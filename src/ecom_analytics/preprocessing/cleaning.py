from __future__ import annotations
from typing import Dict, List, Optional
import pandas as pd

from ecom_analytics.exceptions.errors import SchemaError
from ecom_analytics.logging.logger import get_logger

log = get_logger("preprocessing.cleaning")

def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out.columns = [str(c).strip() for c in out.columns]
    return out

def require_columns(df: pd.DataFrame, columns: List[str], table: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(f"Table '{table}' is missing column(s): {', '.join(missing)}", table=table, column=missing[0])

def _blank_to_na(s: pd.Series) -> pd.Series:
    if s.dtype == object or pd.api.types.is_string_dtype(s):
        blank = s.astype("string").str.strip().eq("").fillna(False).astype(bool)
        return s.mask(blank, None)
    return s

def coerce_types(
    df: pd.DataFrame,
    column_types: Dict[str, str],
    table: str = "",
    date_format: Optional[str] = None,
) -> pd.DataFrame:
    """Cast declared columns to their registry types.

    A value that is present before the cast and null after it is a mistyped
    cell; that aborts the load with SchemaError naming the column.
    """
    require_columns(df, list(column_types.keys()), table)
    out = df.copy()
    for col, typ in column_types.items():
        src = _blank_to_na(out[col])
        if typ == "datetime":
            converted = pd.to_datetime(src, errors="coerce", format=date_format)
        elif typ == "int":
            converted = pd.to_numeric(src, errors="coerce")
            fractional = converted.notna() & (converted % 1 != 0)
            if fractional.any():
                bad = src[fractional].astype(str).head(3).tolist()
                raise SchemaError(f"Column '{table}.{col}' expects int, got {bad}", table=table, column=col)
            converted = converted.astype("Int64")
        elif typ == "float":
            converted = pd.to_numeric(src, errors="coerce").astype("float64")
        else:
            converted = src.astype("string")

        failed = src.notna() & converted.isna()
        if failed.any():
            bad = src[failed].astype(str).head(3).tolist()
            raise SchemaError(
                f"Column '{table}.{col}' expects {typ}; {int(failed.sum())} value(s) could not be parsed, e.g. {bad}",
                table=table,
                column=col,
            )
        out[col] = converted
        log.debug("Type coerced", extra={"table": table, "column": col, "type": typ})
    return out
