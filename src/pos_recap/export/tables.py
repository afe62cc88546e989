"""Table model shared by screen and PDF rendering.

Both renderers consume the ``ReportTable`` list built here, so a figure on
screen and the same figure in the exported document always come from the
same aggregation and the same formatting call.

Tables, in order:
- transaction detail (one row per filtered sale)
- one rollup per dimension (channel, product, admin, ...)
- supplementary listings of reference entities, per ``Section``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

import pandas as pd

from pos_recap.data.models import SaleRecord, Snapshot
from pos_recap.exceptions import ExportError
from pos_recap.formatting import format_count, format_currency, format_date
from pos_recap.reports.aggregate import (
    DEFAULT_DIMENSIONS,
    DIMENSION_LABELS,
    AggregationRow,
    Dimension,
    DimensionSpec,
    ReportKPIs,
    resolve_dimensions,
)

logger = logging.getLogger(__name__)

MISSING = "-"
NO_DATA = "Tidak ada data"
NO_TRANSACTIONS = "Tidak ada transaksi pada periode ini"


class Section(str, Enum):
    """Reference-entity listings that can be appended to an export."""

    CUSTOMERS = "customers"
    PRODUCTS = "products"
    CHANNELS = "channels"
    PAYMENTS = "payments"
    ADMINS = "admins"


# section -> (title, ((attribute, column header), ...), column weights)
SECTION_LAYOUTS = {
    Section.CUSTOMERS: (
        "Daftar Pelanggan",
        (("name", "Nama"), ("username", "Username"), ("note", "Catatan")),
        (0.3, 0.3, 0.4),
    ),
    Section.PRODUCTS: (
        "Daftar Produk",
        (("name", "Nama"), ("type", "Tipe"), ("sku", "SKU")),
        (0.4, 0.3, 0.3),
    ),
    Section.CHANNELS: (
        "Daftar Channel",
        (("name", "Nama"), ("desc", "Deskripsi"), ("url", "URL")),
        (0.25, 0.4, 0.35),
    ),
    Section.PAYMENTS: (
        "Daftar Metode Pembayaran",
        (("name", "Nama"), ("desc", "Deskripsi"), ("code", "Kode")),
        (0.3, 0.5, 0.2),
    ),
    Section.ADMINS: (
        "Daftar Admin",
        (("name", "Nama"), ("username", "Username"), ("note", "Catatan")),
        (0.3, 0.3, 0.4),
    ),
}

DETAIL_HEADERS = (
    "Tanggal", "Pelanggan", "Produk", "Channel", "Harga", "Pembayaran", "Admin", "Catatan"
)
DETAIL_WEIGHTS = (0.10, 0.14, 0.15, 0.11, 0.11, 0.11, 0.10, 0.18)


@dataclass(frozen=True)
class ReportTable:
    """One renderable table.

    Attributes:
        key: Stable identifier ("detail", "rollup:channel", "section:customers").
        kind: "detail", "rollup" or "section"; renderers style by kind.
        title: Heading shown above the table.
        headers: Column headers.
        rows: Formatted cell texts.
        numeric_columns: Column indexes rendered right-aligned.
        weights: Relative column widths.
        empty_message: Shown in place of rows when there are none.
    """

    key: str
    kind: str
    title: str
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    numeric_columns: tuple[int, ...] = ()
    weights: Optional[tuple[float, ...]] = None
    empty_message: str = NO_DATA

    @property
    def is_empty(self) -> bool:
        return not self.rows


def detail_row(sale: SaleRecord) -> tuple[str, ...]:
    """Format one sale for the transaction detail table."""
    return (
        format_date(sale.purchase_date),
        sale.customer.display_name(MISSING),
        sale.product.display_name(MISSING),
        sale.channel.display_name(MISSING),
        format_currency(sale.price),
        sale.payment.display_name(MISSING),
        sale.admin.display_name(MISSING),
        sale.note or MISSING,
    )


def detail_table(filtered: Sequence[SaleRecord]) -> ReportTable:
    return ReportTable(
        key="detail",
        kind="detail",
        title="Detail Transaksi",
        headers=DETAIL_HEADERS,
        rows=tuple(detail_row(sale) for sale in filtered),
        numeric_columns=(4,),
        weights=DETAIL_WEIGHTS,
        empty_message=NO_TRANSACTIONS,
    )


def dimension_label(name: str) -> str:
    try:
        return DIMENSION_LABELS[Dimension(name)]
    except ValueError:
        return name.replace("_", " ").title()


def rollup_table(name: str, rows: Sequence[AggregationRow]) -> ReportTable:
    label = dimension_label(name)
    return ReportTable(
        key=f"rollup:{name}",
        kind="rollup",
        title=f"Ringkasan per {label}",
        headers=(label, "Total Order", "Total Pendapatan"),
        rows=tuple(
            (row.name, format_count(row.orders), format_currency(row.revenue)) for row in rows
        ),
        numeric_columns=(1, 2),
        weights=(0.5, 0.2, 0.3),
    )


def section_table(section: Section, entities: Iterable[object]) -> ReportTable:
    title, columns, weights = SECTION_LAYOUTS[section]
    return ReportTable(
        key=f"section:{section.value}",
        kind="section",
        title=title,
        headers=tuple(header for _, header in columns),
        rows=tuple(
            tuple(getattr(entity, attr) or MISSING for attr, _ in columns) for entity in entities
        ),
        weights=weights,
    )


def resolve_sections(sections: Optional[Sequence[Section | str]]) -> list[Section]:
    """Return the sections to include; None means every section.

    Raises:
        ValueError: If a section name is unknown.
    """
    if sections is None:
        return list(Section)
    resolved: list[Section] = []
    for section in sections:
        try:
            member = Section(section)
        except ValueError:
            names = ", ".join(s.value for s in Section)
            raise ValueError(f"Invalid section '{section}'. Must be one of: {names}.") from None
        if member not in resolved:
            resolved.append(member)
    return resolved


def build_report_tables(
    filtered: Sequence[SaleRecord],
    rollups: Mapping[str, Sequence[AggregationRow]],
    *,
    dimensions: DimensionSpec = DEFAULT_DIMENSIONS,
    sections: Optional[Sequence[Section | str]] = None,
    reference: Optional[Snapshot] = None,
) -> list[ReportTable]:
    """Build every table of a report.

    Args:
        filtered: Filtered sales, in display order.
        rollups: Rollup rows per dimension name.
        dimensions: Dimensions to render a rollup table for; a dimension
            without rows still gets a table carrying the "no data" message.
        sections: Supplementary listings to append; None means all of them,
            an empty sequence means none.
        reference: Snapshot providing the reference entities for the
            listings. Without it no listing is rendered.

    Returns:
        Tables in render order.
    """
    tables = [detail_table(filtered)]
    for name in resolve_dimensions(dimensions):
        tables.append(rollup_table(name, rollups.get(name, [])))

    if reference is not None:
        for section in resolve_sections(sections):
            tables.append(section_table(section, reference.entities(section.value)))

    return tables


def summary_lines(kpis: ReportKPIs) -> list[str]:
    """KPI summary block, one line per figure."""
    return [
        f"Total Penjualan: {format_count(kpis.total_orders)} transaksi",
        f"Total Pendapatan: {format_currency(kpis.total_revenue)}",
        f"Rata-rata per Transaksi: {format_currency(kpis.average_order_value)}",
    ]


DETAIL_FRAME_COLUMNS = [
    "id", "tanggal", "pelanggan", "produk", "channel", "harga",
    "pembayaran", "admin", "link", "tanggal_kirim", "catatan",
]


def detail_frame(filtered: Sequence[SaleRecord]) -> pd.DataFrame:
    """Return the filtered sales as a DataFrame with raw (unformatted) values."""
    rows = [
        {
            "id": sale.id,
            "tanggal": sale.purchase_date.isoformat() if sale.purchase_date else "",
            "pelanggan": sale.customer.display_name(MISSING),
            "produk": sale.product.display_name(MISSING),
            "channel": sale.channel.display_name(MISSING),
            "harga": sale.price,
            "pembayaran": sale.payment.display_name(MISSING),
            "admin": sale.admin.display_name(MISSING),
            "link": sale.link,
            "tanggal_kirim": sale.ship_date.isoformat() if sale.ship_date else "",
            "catatan": sale.note,
        }
        for sale in filtered
    ]
    if not rows:
        return pd.DataFrame(columns=DETAIL_FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=DETAIL_FRAME_COLUMNS)


def write_detail_csv(filtered: Sequence[SaleRecord], path: str | Path) -> Path:
    """Write the transaction detail as CSV.

    Raises:
        ExportError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        detail_frame(filtered).to_csv(path, index=False, encoding="utf-8")
    except OSError as e:
        logger.error("Error writing detail CSV %s: %s", path, e)
        raise ExportError(f"Could not write {path}: {e}") from e
    logger.info("Wrote %d detail rows to %s", len(filtered), path)
    return path
