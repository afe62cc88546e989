"""Public API for the sales recap.

This module provides a clean, configurable API for building a sales recap
from a snapshot: resolve the window, filter, aggregate.

``build_sales_report``:
- does NOT write any files (see ``pos_recap.export`` for that),
- does NOT parse CLI arguments or read environment variables,
- does NOT print (logging only),
- reads the snapshot exactly once per call, so every call sees fresh data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union

from pos_recap.data.models import Snapshot
from pos_recap.data.repository import SnapshotRepository
from pos_recap.reports.aggregate import (
    DEFAULT_DIMENSIONS,
    AggregationResult,
    Dimension,
    filter_and_aggregate,
)
from pos_recap.reports.window import DateWindow, Preset, format_period, resolve_window

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Laporan Rekapan Penjualan"


@dataclass
class ReportConfig:
    """Configuration for a sales recap.

    Attributes:
        preset: Reporting period (default: this month).
        custom_from: Start date string for the custom preset.
        custom_to: End date string for the custom preset.
        search_text: Optional free-text filter.
        dimensions: Dimensions to roll up by (default: channel, product, admin).
        title: Report title used by the exporters.
    """

    preset: Preset = Preset.MONTHLY
    custom_from: Optional[str] = None
    custom_to: Optional[str] = None
    search_text: Optional[str] = None
    dimensions: List[Dimension] = field(default_factory=lambda: list(DEFAULT_DIMENSIONS))
    title: str = DEFAULT_TITLE


@dataclass
class SalesReport:
    """Result of the sales recap pipeline.

    Attributes:
        window: Resolved date window.
        period: Human-readable period label for headers.
        result: Filtered sales, KPIs and rollups.
        snapshot: The snapshot the report was computed from; exporters use
            it for the supplementary reference listings.
        config: Configuration the report was built with.
        generated_at: When the report was computed.
    """

    window: DateWindow
    period: str
    result: AggregationResult
    snapshot: Snapshot
    config: ReportConfig
    generated_at: datetime


def build_sales_report(
    source: Union[SnapshotRepository, Snapshot],
    config: Optional[ReportConfig] = None,
    now: Optional[datetime] = None,
) -> SalesReport:
    """Build a sales recap from a repository or a snapshot.

    Args:
        source: Repository to read a fresh snapshot from, or a snapshot.
        config: Report configuration; defaults to ``ReportConfig()``.
        now: Reference instant for the window; defaults to the current time.

    Returns:
        SalesReport with the resolved window and the aggregation result.

    Raises:
        RepositoryError: If the repository cannot load a snapshot.
        ValueError: If the config names an unknown preset or dimension.

    Examples:
        >>> from pos_recap.data import JsonFileRepository
        >>> repo = JsonFileRepository("data/snapshot.json")
        >>> report = build_sales_report(repo, ReportConfig(preset=Preset.WEEKLY))
        >>> report.result.kpis.total_revenue
        1250000.0

    """
    if config is None:
        config = ReportConfig()
    if now is None:
        now = datetime.now()

    snapshot = source if isinstance(source, Snapshot) else source.load_snapshot()

    window = resolve_window(config.preset, now, config.custom_from, config.custom_to)
    result = filter_and_aggregate(
        snapshot.sales,
        window,
        search_text=config.search_text,
        dimensions=config.dimensions,
    )

    period = format_period(window)
    logger.info(
        "Sales recap %s (%s): %d of %d sales, revenue %.0f",
        Preset.parse(config.preset).value,
        period,
        result.kpis.total_orders,
        len(snapshot.sales),
        result.kpis.total_revenue,
    )

    return SalesReport(
        window=window,
        period=period,
        result=result,
        snapshot=snapshot,
        config=config,
        generated_at=now,
    )
