from __future__ import annotations
from pathlib import Path
from typing import Dict, Iterable, Optional
import fnmatch

from ecom_analytics.schema.registry import SchemaRegistry
from ecom_analytics.logging.logger import get_logger

log = get_logger("ingestion.mapper")

def map_file_to_table(registry: SchemaRegistry, filename: str) -> Optional[str]:
    name = Path(filename).name.lower()
    for tname in registry.list_tables():
        spec = registry.get_table(tname)
        for pat in spec.file_patterns:
            if fnmatch.fnmatch(name, pat.lower()):
                log.debug("Mapped file to table", extra={"file": filename, "table": tname, "pattern": pat})
                return tname
    return None

def discover_table_files(registry: SchemaRegistry, files: Iterable[Path]) -> Dict[str, Path]:
    """Assign each registry table the first matching file (files taken in name order)."""
    found: Dict[str, Path] = {}
    for f in sorted(files, key=lambda p: p.name):
        table = map_file_to_table(registry, f.name)
        if table is None:
            log.info("Ignoring unmapped file", extra={"file": f.name})
            continue
        if table in found:
            log.warning("Multiple files for table; keeping first", extra={"table": table, "kept": found[table].name, "ignored": f.name})
            continue
        found[table] = f
    return found
