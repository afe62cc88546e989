"""Sales recap domain module.

This module turns a snapshot of sales into a recap for a reporting period:

- **window**: preset (daily/weekly/monthly/yearly/all-time/custom) -> DateWindow
- **aggregate**: filter by window and search text, KPIs, per-dimension rollups
- **dashboard**: all-time KPIs, top channel, last 7 days, month per channel
- **api**: ``build_sales_report`` orchestrating the above

Example:
    >>> from datetime import datetime
    >>> from pos_recap.data import JsonFileRepository
    >>> from pos_recap.reports import Preset, ReportConfig, build_sales_report
    >>>
    >>> repo = JsonFileRepository("data/snapshot.json")
    >>> report = build_sales_report(repo, ReportConfig(preset=Preset.MONTHLY))
    >>> report.result.kpis.total_orders
    2
    >>> report.result.top("channel").name
    'Shopee'
"""

from pos_recap.reports.aggregate import (
    DEFAULT_DIMENSIONS,
    AggregationResult,
    AggregationRow,
    Dimension,
    ReportKPIs,
    aggregate_by,
    compute_kpis,
    filter_and_aggregate,
    filter_sales,
    top_entity,
)
from pos_recap.reports.api import ReportConfig, SalesReport, build_sales_report
from pos_recap.reports.dashboard import DailyStat, DashboardSummary, build_dashboard
from pos_recap.reports.window import DateWindow, Preset, format_period, resolve_window

__all__ = [
    "DEFAULT_DIMENSIONS",
    "AggregationResult",
    "AggregationRow",
    "DailyStat",
    "DashboardSummary",
    "DateWindow",
    "Dimension",
    "Preset",
    "ReportConfig",
    "ReportKPIs",
    "SalesReport",
    "aggregate_by",
    "build_dashboard",
    "build_sales_report",
    "compute_kpis",
    "filter_and_aggregate",
    "filter_sales",
    "format_period",
    "resolve_window",
    "top_entity",
]
