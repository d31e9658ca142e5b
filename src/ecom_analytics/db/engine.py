from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence
import duckdb
import pandas as pd

from ecom_analytics.data.session import DataSession
from ecom_analytics.exceptions.errors import ReportError
from ecom_analytics.logging.logger import get_logger

log = get_logger("db.engine")


class DuckDBEngine:
    """Short-lived DuckDB connection with session tables registered as views.

    Use as a context manager; each report gets its own engine so reports never
    share connection state.
    """

    def __init__(self, session: DataSession, tables: Optional[Iterable[str]] = None):
        self.session = session
        self.tables = list(tables) if tables is not None else session.available_tables()
        self._con: Optional[duckdb.DuckDBPyConnection] = None

    def __enter__(self) -> "DuckDBEngine":
        self.session.ensure_tables(self.tables)
        self._con = duckdb.connect(database=":memory:")
        try:
            for t in self.tables:
                self._con.register(t, self.session.get_table(t))
        except duckdb.Error as e:
            self._con.close()
            self._con = None
            raise ReportError(f"Failed to register tables: {e}") from e
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._con is not None:
            self._con.close()
            self._con = None

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> pd.DataFrame:
        if self._con is None:
            raise ReportError("Engine is not open; use it as a context manager")
        log.debug("Executing SQL", extra={"sql": sql[:500] + ("..." if len(sql) > 500 else "")})
        try:
            rel = self._con.execute(sql, list(params) if params else None)
            return rel.df()
        except duckdb.Error as e:
            raise ReportError(f"Query failed: {e}") from e
