"""Monitoring dashboard figures.

The dashboard summarizes the whole snapshot rather than a filtered window:
all-time KPIs, the top channel by revenue, the last seven days and the
current month's performance per channel.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta

from pos_recap.data.models import Snapshot
from pos_recap.reports.aggregate import (
    AggregationRow,
    ReportKPIs,
    aggregate_by,
    compute_kpis,
    top_entity,
)

logger = logging.getLogger(__name__)

DASHBOARD_DAYS = 7


@dataclass(frozen=True)
class DailyStat:
    day: date
    orders: int
    revenue: float


@dataclass(frozen=True)
class DashboardSummary:
    """Figures shown on the monitoring dashboard.

    Attributes:
        kpis: KPIs over every sale in the snapshot.
        top_channel: Name of the channel id with the highest revenue, "-" if
            there are no sales or that id is not in the channel collection.
        last_days: One entry per day for the last seven days, oldest first,
            including days without sales.
        month_channels: This month's orders/revenue per channel, in the order
            of the channel collection; channels without orders are left out.
    """

    today: date
    kpis: ReportKPIs
    top_channel: str
    last_days: list[DailyStat] = field(default_factory=list)
    month_channels: list[AggregationRow] = field(default_factory=list)


def build_dashboard(snapshot: Snapshot, today: date) -> DashboardSummary:
    """Compute dashboard figures for ``today`` from a snapshot."""
    sales = snapshot.sales

    # grouped by channel id; the name comes from the channel collection
    top = top_entity(aggregate_by(sales, lambda sale: sale.channel.id))
    channel_names = {channel.id: channel.name for channel in snapshot.channels}
    top_channel = (channel_names.get(top.name) if top else None) or "-"

    last_days = []
    for offset in range(DASHBOARD_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_prices = [sale.price for sale in sales if sale.purchase_date == day]
        last_days.append(DailyStat(day=day, orders=len(day_prices), revenue=math.fsum(day_prices)))

    month_sales = [
        sale
        for sale in sales
        if sale.purchase_date is not None
        and (sale.purchase_date.year, sale.purchase_date.month) == (today.year, today.month)
    ]
    month_channels = []
    for channel in snapshot.channels:
        prices = [sale.price for sale in month_sales if sale.channel.id == channel.id]
        if prices:
            month_channels.append(
                AggregationRow(name=channel.name, orders=len(prices), revenue=math.fsum(prices))
            )

    logger.debug("Built dashboard for %s from %d sales", today, len(sales))
    return DashboardSummary(
        today=today,
        kpis=compute_kpis(sales),
        top_channel=top_channel,
        last_days=last_days,
        month_channels=month_channels,
    )
