from __future__ import annotations
from pathlib import Path
from typing import Optional

from ecom_analytics.config.settings import Settings
from ecom_analytics.data.session import DataSession
from ecom_analytics.exceptions.errors import DataIngestionError
from ecom_analytics.ingestion.mapper import discover_table_files
from ecom_analytics.ingestion.reader import read_table_file
from ecom_analytics.logging.logger import get_logger
from ecom_analytics.preprocessing.cleaning import standardize_columns, coerce_types
from ecom_analytics.schema.registry import SchemaRegistry

log = get_logger("ingestion.loader")


def load_session(settings: Settings, registry: SchemaRegistry, data_dir: Optional[str] = None) -> DataSession:
    """Load every registry table from ``data_dir`` into a new DataSession.

    All nine tables must be present; a missing file, an undecodable file or a
    column that does not match its declaration aborts the whole load.
    """
    root = Path(data_dir or settings.data_dir)
    if not root.is_dir():
        raise DataIngestionError(f"Data directory not found: {root}")

    files = [p for p in root.iterdir() if p.is_file()]
    mapping = discover_table_files(registry, files)
    missing = [t for t in registry.list_tables() if t not in mapping]
    if missing:
        raise DataIngestionError(f"No input file found for table(s): {', '.join(missing)} in {root}")

    session = DataSession(registry=registry)
    for table in registry.list_tables():
        path = mapping[table]
        res = read_table_file(
            str(path),
            delimiter=settings.delimiter,
            fallback_encodings=settings.fallback_encodings,
            skip_bad_lines=settings.skip_bad_lines,
        )
        df = standardize_columns(res.df)
        spec = registry.get_table(table)
        df = coerce_types(df, spec.column_types(), table=table, date_format=settings.date_format)
        session.register_table(table, df, path.name)

    log.info("Dataset loaded", extra={"data_dir": str(root), "tables": len(session.tables)})
    return session
