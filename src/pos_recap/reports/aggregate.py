"""Sales filtering and aggregation.

This module selects the sales that fall inside a date window (and match an
optional free-text search), then summarizes them:

- **KPIs**: total orders, total revenue, average order value
- **Rollups**: orders and revenue per distinct value of a dimension
  (channel, product, admin, ...), in first-seen order
- **Top entity**: the rollup row with the highest revenue

Every function here is pure and total: inputs are never mutated, and
malformed values (missing references, bad prices) degrade to the "N/A"
sentinel or 0 instead of raising.

Rollups accumulate over the matching sales in input order, so "first seen"
means first in the snapshot; only the detail list is sorted newest first.

Tie-break for ``top_entity``: when several rows share the maximal revenue,
the row that was accumulated first (i.e. whose key appears first among the
matching sales in input order) wins.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Mapping, Sequence, Union

import pandas as pd

from pos_recap.data.models import UNRESOLVED, SaleRecord
from pos_recap.reports.window import DateWindow
from pos_recap.utils import coerce_price

logger = logging.getLogger(__name__)

KeyFn = Callable[[SaleRecord], str]


class Dimension(str, Enum):
    """Reference dimensions sales can be rolled up by."""

    CHANNEL = "channel"
    PRODUCT = "product"
    ADMIN = "admin"
    CUSTOMER = "customer"
    PAYMENT = "payment"

    @property
    def label(self) -> str:
        return DIMENSION_LABELS[self]

    def key_fn(self) -> KeyFn:
        """Return a key function yielding this dimension's display name."""
        kind = self.value

        def key(sale: SaleRecord) -> str:
            return sale.ref(kind).display_name()

        return key


# Column labels used in report tables
DIMENSION_LABELS = {
    Dimension.CHANNEL: "Channel",
    Dimension.PRODUCT: "Produk",
    Dimension.ADMIN: "Admin",
    Dimension.CUSTOMER: "Pelanggan",
    Dimension.PAYMENT: "Pembayaran",
}

DEFAULT_DIMENSIONS = (Dimension.CHANNEL, Dimension.PRODUCT, Dimension.ADMIN)

DimensionSpec = Union[Mapping[str, KeyFn], Iterable[Union[Dimension, str]]]


@dataclass(frozen=True)
class AggregationRow:
    """Orders and revenue for one distinct dimension value."""

    name: str
    orders: int
    revenue: float


@dataclass(frozen=True)
class ReportKPIs:
    """Scalar summary of a set of sales."""

    total_orders: int = 0
    total_revenue: float = 0.0
    average_order_value: float = 0.0


@dataclass(frozen=True)
class AggregationResult:
    """Result of ``filter_and_aggregate``.

    Attributes:
        filtered: Matching sales, newest purchase date first.
        kpis: KPIs over ``filtered``.
        rollups: Rows per dimension name. Dimensions without rows are
            absent, so an empty ``filtered`` gives an empty mapping.
    """

    filtered: tuple[SaleRecord, ...] = ()
    kpis: ReportKPIs = field(default_factory=ReportKPIs)
    rollups: dict[str, list[AggregationRow]] = field(default_factory=dict)

    def rollup(self, dimension: Dimension | str) -> list[AggregationRow]:
        key = dimension.value if isinstance(dimension, Dimension) else dimension
        return self.rollups.get(key, [])

    def top(self, dimension: Dimension | str) -> AggregationRow | None:
        return top_entity(self.rollup(dimension))


def _price_text(price: float) -> str:
    return str(int(price)) if float(price).is_integer() else str(price)


def search_fields(sale: SaleRecord) -> list[str]:
    """Return the texts a free-text search is matched against."""
    return [
        sale.customer.name or "",
        sale.customer.attr("username"),
        sale.product.name or "",
        sale.product.attr("type"),
        sale.channel.name or "",
        sale.payment.name or "",
        sale.admin.name or "",
        sale.purchase_date.isoformat() if sale.purchase_date else "",
        _price_text(sale.price),
        sale.link,
        sale.ship_date.isoformat() if sale.ship_date else "",
        sale.note,
    ]


def matches_search(sale: SaleRecord, search_text: str | None) -> bool:
    """Case-insensitive substring match on any search field.

    A missing or blank search text matches everything.
    """
    if search_text is None or not search_text.strip():
        return True
    needle = search_text.lower()
    return any(needle in text.lower() for text in search_fields(sale) if text)


def _date_sort_key(sale: SaleRecord) -> str:
    return sale.purchase_date.isoformat() if sale.purchase_date else ""


def select_sales(
    sales: Iterable[SaleRecord],
    window: DateWindow,
    search_text: str | None = None,
) -> list[SaleRecord]:
    """Select sales inside ``window`` that match ``search_text``, in input order."""
    return [
        sale
        for sale in sales
        if window.contains(sale.purchase_date) and matches_search(sale, search_text)
    ]


def newest_first(sales: Iterable[SaleRecord]) -> list[SaleRecord]:
    """Sort by purchase date, newest first; sales sharing a date keep their order."""
    # reverse=True keeps equal keys in input order
    return sorted(sales, key=_date_sort_key, reverse=True)


def filter_sales(
    sales: Iterable[SaleRecord],
    window: DateWindow,
    search_text: str | None = None,
) -> list[SaleRecord]:
    """Select sales inside ``window`` that match ``search_text``.

    Args:
        sales: Sales to filter (not modified).
        window: Inclusive date window.
        search_text: Optional free-text filter.

    Returns:
        Matching sales sorted by purchase date, newest first. The sort is
        stable: sales sharing a date keep their input order.
    """
    return newest_first(select_sales(sales, window, search_text))


def compute_kpis(sales: Sequence[SaleRecord]) -> ReportKPIs:
    """Compute order count, revenue sum and average order value."""
    total_orders = len(sales)
    total_revenue = math.fsum(coerce_price(sale.price) for sale in sales)
    average = total_revenue / total_orders if total_orders > 0 else 0.0
    return ReportKPIs(
        total_orders=total_orders,
        total_revenue=total_revenue,
        average_order_value=average,
    )


def _safe_key(key_fn: KeyFn, sale: SaleRecord) -> str:
    try:
        key = key_fn(sale)
    except Exception as e:
        logger.warning("Key function failed for sale %s: %s", sale.id, e)
        return UNRESOLVED
    if key is None or key == "":
        return UNRESOLVED
    return str(key)


def aggregate_by(sales: Sequence[SaleRecord], key_fn: KeyFn) -> list[AggregationRow]:
    """Roll sales up by the key ``key_fn`` extracts.

    Args:
        sales: Sales to aggregate.
        key_fn: Returns the grouping key (a display name) for a sale. Keys
            that are empty or cannot be computed group under "N/A".

    Returns:
        One row per distinct key, in order of first appearance.
    """
    if not sales:
        return []

    frame = pd.DataFrame(
        {
            "name": [_safe_key(key_fn, sale) for sale in sales],
            "price": [coerce_price(sale.price) for sale in sales],
        }
    )
    grouped = frame.groupby("name", sort=False)["price"].agg(orders="size", revenue="sum")

    return [
        AggregationRow(name=str(name), orders=int(orders), revenue=float(revenue))
        for name, orders, revenue in zip(grouped.index, grouped["orders"], grouped["revenue"])
    ]


def top_entity(rows: Iterable[AggregationRow]) -> AggregationRow | None:
    """Return the row with strictly maximal revenue; the first one wins ties."""
    best: AggregationRow | None = None
    for row in rows:
        if best is None or row.revenue > best.revenue:
            best = row
    return best


def resolve_dimensions(dimensions: DimensionSpec) -> dict[str, KeyFn]:
    """Turn a dimension selection into ``{name: key function}``.

    Args:
        dimensions: Either a mapping of name to key function, or an iterable
            of ``Dimension`` members / dimension names.

    Raises:
        ValueError: If a dimension name is unknown.
    """
    if isinstance(dimensions, Mapping):
        return {str(name): fn for name, fn in dimensions.items()}
    resolved: dict[str, KeyFn] = {}
    for dimension in dimensions:
        try:
            member = Dimension(dimension)
        except ValueError:
            names = ", ".join(d.value for d in Dimension)
            raise ValueError(f"Invalid dimension '{dimension}'. Must be one of: {names}.") from None
        resolved[member.value] = member.key_fn()
    return resolved


def filter_and_aggregate(
    sales: Iterable[SaleRecord],
    window: DateWindow,
    search_text: str | None = None,
    dimensions: DimensionSpec = DEFAULT_DIMENSIONS,
) -> AggregationResult:
    """Filter sales and compute KPIs and per-dimension rollups.

    Args:
        sales: Sales snapshot (not modified).
        window: Inclusive date window.
        search_text: Optional free-text filter.
        dimensions: Dimensions to roll up by; see ``resolve_dimensions``.

    Returns:
        AggregationResult with filtered sales, KPIs and rollups.

    Examples:
        >>> result = filter_and_aggregate(snapshot.sales, resolve_window("monthly", now))
        >>> result.kpis.total_orders
        2
        >>> [(r.name, r.orders) for r in result.rollup("channel")]
        [('Shopee', 1), ('Tokopedia', 1)]

    """
    key_fns = resolve_dimensions(dimensions)
    selected = select_sales(sales, window, search_text)
    filtered = newest_first(selected)
    kpis = compute_kpis(filtered)

    rollups: dict[str, list[AggregationRow]] = {}
    for name, key_fn in key_fns.items():
        rows = aggregate_by(selected, key_fn)
        if rows:
            rollups[name] = rows

    logger.debug(
        "Aggregated %d sales into %d rollups (revenue %.2f)",
        kpis.total_orders,
        len(rollups),
        kpis.total_revenue,
    )
    return AggregationResult(filtered=tuple(filtered), kpis=kpis, rollups=rollups)
