"""Command-line entry point for sales recaps.

Usage:
    pos-recap report --preset monthly --snapshot data/snapshot.json --pdf-dir data/exports
    pos-recap report --preset custom --from 2024-03-01 --to 2024-03-15 --search shopee
    pos-recap report --preset all-time --api https://pos.example.com/api --csv out/detail.csv
    pos-recap dashboard --snapshot data/snapshot.json

Without ``--snapshot`` or ``--api`` the snapshot is read from the POS API
when ``POS_API_BASE`` is set, otherwise from ``<data-root>/snapshot.json``.

Exit codes: 0 on success, 2 when data cannot be loaded or exported.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from pos_recap.config import DataPaths
from pos_recap.data.repository import ApiRepository, JsonFileRepository, SnapshotRepository
from pos_recap.exceptions import PosRecapError
from pos_recap.export.console import (
    console_safe,
    format_dashboard_for_console,
    format_report_for_console,
)
from pos_recap.export.pdf import export_sales_report, write_report
from pos_recap.export.tables import Section, write_detail_csv
from pos_recap.reports.aggregate import DEFAULT_DIMENSIONS, Dimension
from pos_recap.reports.api import DEFAULT_TITLE, ReportConfig, build_sales_report
from pos_recap.reports.dashboard import build_dashboard
from pos_recap.reports.window import Preset

logger = logging.getLogger(__name__)


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--snapshot", type=Path, help="JSON snapshot file to read")
    source.add_argument("--api", metavar="URL", help="Base URL of the POS REST API")
    parser.add_argument(
        "--data-root",
        default="data",
        help="Root directory for snapshot and exports (default: 'data')",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pos-recap", description="POS sales recap reports.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Recap sales for a period")
    report.add_argument(
        "--preset",
        default=Preset.MONTHLY.value,
        choices=[p.value for p in Preset],
        help="Reporting period (default: monthly)",
    )
    report.add_argument("--from", dest="custom_from", help="Custom range start (YYYY-MM-DD)")
    report.add_argument("--to", dest="custom_to", help="Custom range end (YYYY-MM-DD)")
    report.add_argument("--search", help="Free-text filter on sale fields")
    report.add_argument(
        "--dimensions",
        nargs="+",
        choices=[d.value for d in Dimension],
        default=[d.value for d in DEFAULT_DIMENSIONS],
        help="Dimensions to roll up by (default: channel product admin)",
    )
    report.add_argument("--title", default=DEFAULT_TITLE, help="Report title")
    report.add_argument("--pdf-dir", type=Path, help="Write the PDF report into this directory")
    report.add_argument("--csv", type=Path, help="Write the transaction detail to this CSV file")
    report.add_argument(
        "--sections",
        nargs="*",
        choices=[s.value for s in Section],
        default=None,
        help="Reference listings to include (default: all in the PDF, none on screen)",
    )
    _add_source_args(report)
    report.set_defaults(func=run_report)

    dashboard = sub.add_parser("dashboard", help="Show the monitoring dashboard")
    _add_source_args(dashboard)
    dashboard.set_defaults(func=run_dashboard)

    return parser


def repository_from_args(args: argparse.Namespace) -> SnapshotRepository:
    """Pick the snapshot source named on the command line."""
    if args.snapshot is not None:
        return JsonFileRepository(args.snapshot)
    if args.api:
        return ApiRepository(args.api)
    if os.environ.get("POS_API_BASE"):
        return ApiRepository.from_env()
    return JsonFileRepository.from_paths(DataPaths.from_root(args.data_root))


def _emit(text: str) -> None:
    sys.stdout.write(console_safe(text))


def run_report(args: argparse.Namespace) -> int:
    config = ReportConfig(
        preset=Preset.parse(args.preset),
        custom_from=args.custom_from,
        custom_to=args.custom_to,
        search_text=args.search,
        dimensions=[Dimension(d) for d in args.dimensions],
        title=args.title,
    )
    report = build_sales_report(repository_from_args(args), config, now=datetime.now())

    on_screen = args.sections if args.sections is not None else ()
    _emit(format_report_for_console(report, sections=on_screen))

    if args.pdf_dir is not None:
        artifact = export_sales_report(report, sections=args.sections)
        path = write_report(artifact, args.pdf_dir)
        print(f"PDF: {path} ({artifact.page_count} halaman)")

    if args.csv is not None:
        path = write_detail_csv(report.result.filtered, args.csv)
        print(f"CSV: {path}")

    return 0


def run_dashboard(args: argparse.Namespace) -> int:
    snapshot = repository_from_args(args).load_snapshot()
    summary = build_dashboard(snapshot, datetime.now().date())
    _emit(format_dashboard_for_console(summary))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the ``pos-recap`` command.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        return args.func(args)
    except PosRecapError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
