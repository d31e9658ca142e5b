from __future__ import annotations

import argparse
import sys
from datetime import datetime
from typing import List, Optional

from ecom_analytics.config.settings import Settings, load_settings
from ecom_analytics.data.session import DataSession
from ecom_analytics.exceptions.errors import AnalyticsError, ExportError, ReportError
from ecom_analytics.export.exporter import export_report
from ecom_analytics.ingestion.loader import load_session
from ecom_analytics.logging.logger import init_logging, get_logger
from ecom_analytics.reports.catalog import list_reports
from ecom_analytics.reports.integrity import check_dataset
from ecom_analytics.reports.runner import ReportResult, ReportRunner
from ecom_analytics.schema.registry import SchemaRegistry

log = get_logger("cli")

EXIT_OK = 0
EXIT_REPORT_FAILED = 1
EXIT_LOAD_FAILED = 2


def _parse_as_of(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"--as-of expects an ISO date or date-time, got {value!r}") from e


def _print_result(result: ReportResult) -> None:
    rep = result.report
    print(f"\n== {rep.number}. {rep.title} ==")
    print(rep.description)
    for miss in result.missing_references:
        print(f"warning: {miss.to_error()}")
    if result.df.empty:
        print("(no rows)")
    else:
        print(result.df.to_string(index=False))


def _bootstrap(args: argparse.Namespace):
    settings = load_settings(args.config_dir)
    init_logging(settings.log_level, settings.log_file)
    registry = SchemaRegistry.load(settings.schema_path)
    session = load_session(settings, registry, data_dir=args.data_dir)
    return settings, session


def _cmd_list(args: argparse.Namespace) -> int:
    for rep in list_reports():
        print(f"{rep.number:>2}  {rep.name:<28} {rep.title}")
    return EXIT_OK


def _cmd_run(args: argparse.Namespace, settings: Settings, session: DataSession) -> int:
    runner = ReportRunner(
        session,
        strict=settings.strict_references and not args.lenient,
        stale_months=settings.stale_months,
        as_of=args.as_of,
    )
    targets = [t for t in args.reports if t.lower() != "all"]
    keys = None if len(targets) < len(args.reports) else targets
    try:
        outcomes = runner.run_all(keys)
    except ReportError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_REPORT_FAILED

    export_dir = args.export_dir or (settings.export_dir if args.export else None)
    status = EXIT_OK
    for outcome in outcomes:
        if not outcome.ok:
            print(f"\n== {outcome.report.number}. {outcome.report.title} ==")
            print(f"error: {outcome.error}")
            status = EXIT_REPORT_FAILED
            continue
        _print_result(outcome.result)
        if export_dir:
            try:
                paths = export_report(outcome.result, export_dir)
            except ExportError as e:
                print(f"error: {e}", file=sys.stderr)
                status = EXIT_REPORT_FAILED
                continue
            print(f"exported: {paths.csv_path}")
    return status


def _cmd_check(args: argparse.Namespace, settings: Settings, session: DataSession) -> int:
    problems = check_dataset(session)
    if not problems:
        print("All declared references resolve.")
        return EXIT_OK
    for miss in problems:
        print(f"{miss.rule.describe()}: {miss.to_error()}")
    return EXIT_REPORT_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecom-analytics",
        description="Run the descriptive e-commerce reports over a directory of CSV files.",
    )
    parser.add_argument("--config-dir", default="config", help="Directory holding <APP_ENV>.yaml (default: config).")
    parser.add_argument("--data-dir", default=None, help="Directory with the nine input files (defaults from config/DATA_DIR).")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List the available reports.")

    run = sub.add_parser("run", help="Run reports by number or name, or 'all'.")
    run.add_argument("reports", nargs="+", help="Report numbers/names, or 'all'.")
    run.add_argument("--as-of", type=_parse_as_of, default=None, help="Analysis time for stale-product cutoffs (ISO format).")
    run.add_argument("--lenient", action="store_true", help="Drop rows with unresolved join keys instead of failing.")
    run.add_argument("--export", action="store_true", help="Also write CSV/XML/PDF files per report to the configured export_dir.")
    run.add_argument("--export-dir", default=None, help="Like --export, but write to this directory instead.")

    sub.add_parser("check", help="Check referential integrity of the loaded dataset.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "list":
        return _cmd_list(args)

    try:
        settings, session = _bootstrap(args)
    except AnalyticsError as e:
        log.error("Startup failed: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_LOAD_FAILED

    if args.command == "check":
        return _cmd_check(args, settings, session)
    return _cmd_run(args, settings, session)


if __name__ == "__main__":
    raise SystemExit(main())
