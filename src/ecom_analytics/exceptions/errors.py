from __future__ import annotations
from typing import Iterable, List, Optional


class AnalyticsError(Exception):
    """Base exception for ecom_analytics."""

class ConfigError(AnalyticsError):
    pass

class DataIngestionError(AnalyticsError):
    pass

class SchemaError(AnalyticsError):
    """Raised when a table does not match its registry declaration."""

    def __init__(self, message: str, table: Optional[str] = None, column: Optional[str] = None):
        super().__init__(message)
        self.table = table
        self.column = column

class MissingReferenceError(AnalyticsError):
    """An inner-join key has no matching row on the referenced side."""

    def __init__(self, table: str, column: str, referenced_table: str, keys: Iterable[str]):
        self.table = table
        self.column = column
        self.referenced_table = referenced_table
        self.keys: List[str] = list(keys)
        preview = ", ".join(self.keys[:5])
        more = f" (+{len(self.keys) - 5} more)" if len(self.keys) > 5 else ""
        super().__init__(
            f"{table}.{column} has {len(self.keys)} key(s) with no match in {referenced_table}: {preview}{more}"
        )

class ReportError(AnalyticsError):
    pass

class ExportError(AnalyticsError):
    pass
