from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ecom_analytics.data.session import DataSession
from ecom_analytics.db.engine import DuckDBEngine
from ecom_analytics.db.utils import unresolved_keys_sql
from ecom_analytics.exceptions.errors import MissingReferenceError
from ecom_analytics.logging.logger import get_logger
from ecom_analytics.schema.registry import JoinRule

log = get_logger("reports.integrity")


@dataclass(frozen=True)
class MissingReference:
    rule: JoinRule
    keys: List[str]

    def to_error(self) -> MissingReferenceError:
        return MissingReferenceError(
            table=self.rule.left_table,
            column=", ".join(self.rule.left_keys),
            referenced_table=self.rule.right_table,
            keys=self.keys,
        )


def find_missing_references(engine: DuckDBEngine, rules: List[JoinRule]) -> List[MissingReference]:
    """Return, per rule, the referencing keys that have no referenced row."""
    out: List[MissingReference] = []
    for rule in rules:
        df = engine.query(unresolved_keys_sql(rule))
        if df.empty:
            continue
        keys = ["|".join(str(v) for v in row) for row in df.itertuples(index=False, name=None)]
        log.warning(
            "Unresolved join keys",
            extra={"join": rule.describe(), "missing": len(keys), "sample": keys[:5]},
        )
        out.append(MissingReference(rule=rule, keys=keys))
    return out


def check_dataset(session: DataSession, rules: Optional[List[JoinRule]] = None) -> List[MissingReference]:
    """Check every declared inner join of the loaded dataset."""
    rules = rules if rules is not None else session.registry.inner_joins(session.available_tables())
    tables = sorted({t for r in rules for t in (r.left_table, r.right_table)})
    with DuckDBEngine(session, tables) as engine:
        found = find_missing_references(engine, rules)
    log.info("Dataset integrity checked", extra={"rules": len(rules), "violations": len(found)})
    return found
