from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union
import time

import pandas as pd

from ecom_analytics.data.session import DataSession
from ecom_analytics.db.engine import DuckDBEngine
from ecom_analytics.exceptions.errors import AnalyticsError
from ecom_analytics.logging.logger import get_logger
from ecom_analytics.reports.catalog import ReportDefinition, get_report, list_reports
from ecom_analytics.reports.integrity import MissingReference, find_missing_references

log = get_logger("reports.runner")


@dataclass(frozen=True)
class ReportResult:
    report: ReportDefinition
    df: pd.DataFrame
    as_of: datetime
    elapsed_seconds: float = 0.0
    # Populated only in lenient mode; strict mode raises instead
    missing_references: List[MissingReference] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.report.name

    def rows(self) -> List[tuple]:
        return list(self.df.itertuples(index=False, name=None))


@dataclass(frozen=True)
class ReportOutcome:
    report: ReportDefinition
    result: Optional[ReportResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ReportRunner:
    """Runs catalog reports against one loaded DataSession.

    ``as_of`` is fixed when the runner is built, so every report of a run
    shares the same analysis time.
    """

    def __init__(
        self,
        session: DataSession,
        strict: bool = True,
        stale_months: int = 6,
        as_of: Optional[datetime] = None,
    ):
        self.session = session
        self.strict = strict
        self.stale_months = stale_months
        self.as_of = as_of or datetime.now()

    def run(self, key: Union[int, str, ReportDefinition]) -> ReportResult:
        report = key if isinstance(key, ReportDefinition) else get_report(key)
        started = time.perf_counter()
        log.info("Running report", extra={"report": report.name, "strict": self.strict})

        rules = [self.session.registry.join_rule(lt, rt) for lt, rt in report.references]
        params = report.params(self.as_of, self.stale_months) if report.params else None

        with DuckDBEngine(self.session, report.tables) as engine:
            missing = find_missing_references(engine, rules)
            if missing and self.strict:
                raise missing[0].to_error()
            df = engine.query(report.sql, params)

        elapsed = time.perf_counter() - started
        log.info(
            "Report finished",
            extra={"report": report.name, "rows": len(df), "elapsed_s": round(elapsed, 4)},
        )
        return ReportResult(
            report=report,
            df=df,
            as_of=self.as_of,
            elapsed_seconds=elapsed,
            missing_references=missing,
        )

    def run_all(self, keys: Optional[List[Union[int, str]]] = None) -> List[ReportOutcome]:
        """Run several reports (all by default); a failing report does not stop the rest."""
        reports = [get_report(k) for k in keys] if keys else list_reports()
        outcomes: List[ReportOutcome] = []
        for report in reports:
            try:
                outcomes.append(ReportOutcome(report=report, result=self.run(report)))
            except AnalyticsError as e:
                log.exception("Report %s failed", report.name, extra={"report": report.name})
                outcomes.append(ReportOutcome(report=report, error=e))
        failed = sum(1 for o in outcomes if not o.ok)
        log.info("Reports complete", extra={"total": len(outcomes), "failed": failed})
        return outcomes


def run_report(session: DataSession, key: Union[int, str], **kwargs) -> ReportResult:
    return ReportRunner(session, **kwargs).run(key)


def run_all(session: DataSession, **kwargs) -> List[ReportOutcome]:
    return ReportRunner(session, **kwargs).run_all()
