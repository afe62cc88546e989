"""Console output formatting utilities."""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from pos_recap.export.tables import ReportTable, Section, build_report_tables, summary_lines
from pos_recap.formatting import format_count, format_currency, format_date, format_date_long, format_timestamp
from pos_recap.reports.api import SalesReport
from pos_recap.reports.dashboard import DashboardSummary

RULE_WIDTH = 60


def console_safe(text: str, encoding: Optional[str] = None) -> str:
    """Replace characters the console encoding cannot print.

    Windows consoles often run cp1252; printing other characters there
    raises UnicodeEncodeError.
    """
    encoding = encoding or getattr(sys.stdout, "encoding", None) or "utf-8"
    return text.encode(encoding, errors="replace").decode(encoding)


def format_table(table: ReportTable) -> str:
    """Render one table as aligned plain text."""
    if table.is_empty:
        return f"  {table.empty_message}"
    frame = pd.DataFrame([list(row) for row in table.rows], columns=list(table.headers))
    return frame.to_string(index=False)


def format_tables(tables: Sequence[ReportTable]) -> list[str]:
    lines = []
    for table in tables:
        lines.append(f"{table.title}:")
        lines.append("-" * RULE_WIDTH)
        lines.append(format_table(table))
        lines.append("")
    return lines


def format_report_for_console(
    report: SalesReport,
    sections: Optional[Sequence[Section | str]] = (),
    printed_at: Optional[datetime] = None,
) -> str:
    """Build the on-screen rendering of a sales recap.

    Uses the same tables as the PDF export, so both show identical figures.

    Args:
        report: Report built by ``build_sales_report``.
        sections: Reference listings to append (default: none; None: all).
        printed_at: Timestamp shown in the header (default: report time).

    Returns:
        Human-readable text for console output.
    """
    result = report.result
    tables = build_report_tables(
        result.filtered,
        result.rollups,
        dimensions=report.config.dimensions,
        sections=sections,
        reference=report.snapshot,
    )

    lines = [report.config.title, "=" * RULE_WIDTH]
    lines.append(f"Periode: {report.period}")
    lines.append(f"Dicetak: {format_timestamp(printed_at or report.generated_at)}")
    lines.append("")
    lines.append("Ringkasan:")
    lines.extend(f"  {line}" for line in summary_lines(result.kpis))
    lines.append("")
    lines.extend(format_tables(tables))
    return "\n".join(lines).rstrip() + "\n"


def format_dashboard_for_console(summary: DashboardSummary) -> str:
    """Build the on-screen rendering of the monitoring dashboard."""
    kpis = summary.kpis
    lines = [f"Dashboard POS - {format_date_long(summary.today)}", "=" * RULE_WIDTH]
    lines.append(f"Total Penjualan: {format_count(kpis.total_orders)} transaksi")
    lines.append(f"Total Pendapatan: {format_currency(kpis.total_revenue)}")
    lines.append(f"Rata-rata per Transaksi: {format_currency(kpis.average_order_value)}")
    lines.append(f"Channel Teratas: {summary.top_channel}")
    lines.append("")

    lines.append(f"Penjualan {len(summary.last_days)} Hari Terakhir:")
    lines.append("-" * RULE_WIDTH)
    for stat in summary.last_days:
        lines.append(
            f"  {format_date(stat.day)}: {format_count(stat.orders)} order, "
            f"{format_currency(stat.revenue)}"
        )
    lines.append("")

    lines.append("Performa Channel Bulan Ini:")
    lines.append("-" * RULE_WIDTH)
    if not summary.month_channels:
        lines.append("  Belum ada penjualan bulan ini")
    for row in summary.month_channels:
        lines.append(
            f"  {row.name}: {format_count(row.orders)} order, {format_currency(row.revenue)}"
        )
    return "\n".join(lines) + "\n"
