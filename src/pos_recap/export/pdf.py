"""PDF export of a sales recap.

The document is an A4 landscape report with:
- title, print timestamp and period
- KPI summary block
- transaction detail table (header row repeated on every page)
- one rollup table per dimension
- optional listings of reference entities
- a footer "Halaman i dari N - POS & Rekap Penjualan" on every page

Rendering is done with reportlab's platypus layer into memory; writing the
bytes to disk is a separate step (``write_report``) so callers can
also stream or attach the document.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Mapping, Optional, Sequence
from xml.sax.saxutils import escape

from pos_recap.data.models import SaleRecord, Snapshot
from pos_recap.exceptions import ExportError
from pos_recap.export.tables import ReportTable, Section, build_report_tables, summary_lines
from pos_recap.formatting import format_timestamp
from pos_recap.reports.aggregate import (
    DEFAULT_DIMENSIONS,
    AggregationRow,
    DimensionSpec,
    ReportKPIs,
)
from pos_recap.reports.api import DEFAULT_TITLE, SalesReport

logger = logging.getLogger(__name__)

FOOTER_LABEL = "POS & Rekap Penjualan"

# Header fills per table kind, RGB 0-255
HEADER_FILLS = {
    "detail": (66, 139, 202),
    "rollup": (139, 69, 19),
    "section": (46, 125, 50),
}
ALTERNATE_ROW_FILL = (245, 245, 245)

MARGIN_MM = 15

# Longest cell text drawn in the PDF; a table row cannot split across pages,
# so one row must stay shorter than a frame even in the narrowest column.
MAX_CELL_CHARS = 400


def report_filename(day: date, extension: str = "pdf") -> str:
    """Return the export filename for ``day``, e.g. 'report-2024-03-15.pdf'."""
    return f"report-{day.isoformat()}.{extension}"


def page_footer(page: int, total: int) -> str:
    return f"Halaman {page} dari {total} - {FOOTER_LABEL}"


def cell_text(text: str, limit: int = MAX_CELL_CHARS) -> str:
    """Return ``text`` cut to ``limit`` characters, ending in an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "\u2026"


@dataclass
class ExportOptions:
    """Options for ``export_report``.

    Attributes:
        title: Document title.
        period: Period label printed under the title (omitted when None).
        sections: Reference listings to append; None means all of them,
            an empty sequence means none.
        dimensions: Dimensions to render rollup tables for.
        reference: Snapshot holding the reference entities for listings.
        printed_at: Print timestamp (default: now).
    """

    title: str = DEFAULT_TITLE
    period: Optional[str] = None
    sections: Optional[Sequence[Section | str]] = None
    dimensions: DimensionSpec = DEFAULT_DIMENSIONS
    reference: Optional[Snapshot] = None
    printed_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExportArtifact:
    """A rendered document."""

    content: bytes
    filename: str
    page_count: int


def write_report(artifact: ExportArtifact, directory: str | Path) -> Path:
    """Write a rendered document into ``directory`` and return its path.

    Raises:
        ExportError: If the file cannot be written.
    """
    path = Path(directory) / artifact.filename
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(artifact.content)
    except OSError as e:
        logger.error("Error writing %s: %s", path, e)
        raise ExportError(f"Could not write {path}: {e}") from e
    logger.info("Wrote %s (%d pages, %d bytes)", path, artifact.page_count, len(artifact.content))
    return path


def _rgb(colors_module, rgb: tuple[int, int, int]):
    return colors_module.Color(*(channel / 255 for channel in rgb))


def _numbered_canvas(canvas_module, header: str, pages: dict):
    """Build a canvas class that stamps header and "page i of N" footer.

    Pages are buffered until ``save`` so the total page count is known when
    the footer is drawn; the count is also stored in ``pages["count"]``.
    """

    class NumberedCanvas(canvas_module.Canvas):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._saved_page_states = []

        def showPage(self):
            self._saved_page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._saved_page_states)
            pages["count"] = total
            for state in self._saved_page_states:
                self.__dict__.update(state)
                self._draw_page_chrome(total)
                canvas_module.Canvas.showPage(self)
            canvas_module.Canvas.save(self)

        def _draw_page_chrome(self, total: int) -> None:
            width, height = self._pagesize
            margin = MARGIN_MM * 72 / 25.4
            self.saveState()
            self.setFont("Helvetica", 8)
            self.setFillGray(0.45)
            self.drawString(margin, height - margin / 2, header)
            self.drawRightString(width - margin, margin / 2, page_footer(self._pageNumber, total))
            self.restoreState()

    return NumberedCanvas


def _render_pdf(
    title: str,
    period: Optional[str],
    printed_at: datetime,
    kpis: ReportKPIs,
    tables: Sequence[ReportTable],
) -> tuple[bytes, int]:
    try:
        from reportlab.lib import colors
        from reportlab.lib.enums import TA_CENTER, TA_RIGHT
        from reportlab.lib.pagesizes import A4, landscape
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
        from reportlab.lib.units import mm
        from reportlab.pdfgen import canvas
        from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
    except ImportError as e:
        raise ExportError(f"PDF renderer is not available: {e}") from e

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=MARGIN_MM * mm,
        rightMargin=MARGIN_MM * mm,
        topMargin=MARGIN_MM * mm,
        bottomMargin=MARGIN_MM * mm,
        title=title,
        author=FOOTER_LABEL,
    )

    styles = getSampleStyleSheet()
    cell = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=8, leading=10)
    cell_right = ParagraphStyle("CellRight", parent=cell, alignment=TA_RIGHT)
    cell_header = ParagraphStyle(
        "CellHeader", parent=cell, fontName="Helvetica-Bold", textColor=colors.white
    )
    cell_empty = ParagraphStyle(
        "CellEmpty", parent=cell, alignment=TA_CENTER, textColor=colors.grey
    )

    # frame padding is 6pt on each side
    available_width = doc.width - 12

    def pdf_table(table: ReportTable) -> Table:
        column_count = len(table.headers)
        weights = table.weights or tuple(1.0 for _ in table.headers)
        total_weight = sum(weights)
        widths = [available_width * w / total_weight for w in weights]

        data = [[Paragraph(escape(h), cell_header) for h in table.headers]]
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), _rgb(colors, HEADER_FILLS.get(table.kind, (90, 90, 90)))),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]
        if table.is_empty:
            data.append(
                [Paragraph(escape(table.empty_message), cell_empty)] + [""] * (column_count - 1)
            )
            style.append(("SPAN", (0, 1), (-1, 1)))
        else:
            for row in table.rows:
                data.append(
                    [
                        Paragraph(
                            escape(cell_text(text)),
                            cell_right if i in table.numeric_columns else cell,
                        )
                        for i, text in enumerate(row)
                    ]
                )
            style.append(
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, _rgb(colors, ALTERNATE_ROW_FILL)])
            )

        flowable = Table(data, colWidths=widths, repeatRows=1, hAlign="LEFT")
        flowable.setStyle(TableStyle(style))
        return flowable

    story = [
        Paragraph(escape(title), styles["Title"]),
        Paragraph(f"Dicetak: {format_timestamp(printed_at)}", styles["Normal"]),
    ]
    if period:
        story.append(Paragraph(f"Periode: {escape(period)}", styles["Normal"]))
    story.append(Spacer(1, 5 * mm))
    story.append(Paragraph("Ringkasan:", styles["Heading3"]))
    story.extend(Paragraph(escape(line), styles["Normal"]) for line in summary_lines(kpis))

    for table in tables:
        story.append(Spacer(1, 6 * mm))
        story.append(Paragraph(escape(table.title), styles["Heading3"]))
        story.append(pdf_table(table))

    pages = {"count": 0}
    doc.build(story, canvasmaker=_numbered_canvas(canvas, title, pages))
    return buffer.getvalue(), pages["count"]


def export_report(
    filtered: Sequence[SaleRecord],
    rollups: Mapping[str, Sequence[AggregationRow]],
    kpis: ReportKPIs,
    options: Optional[ExportOptions] = None,
) -> ExportArtifact:
    """Render a sales recap as a PDF document.

    Args:
        filtered: Filtered sales, in display order.
        rollups: Rollup rows per dimension name.
        kpis: KPIs over ``filtered``.
        options: Title, period, sections and reference data.

    Returns:
        ExportArtifact named after the print date.

    Raises:
        ExportError: If the renderer is unavailable or rendering fails.
        ValueError: If ``options`` names an unknown section or dimension.
    """
    if options is None:
        options = ExportOptions()
    printed_at = options.printed_at or datetime.now()

    tables = build_report_tables(
        filtered,
        rollups,
        dimensions=options.dimensions,
        sections=options.sections,
        reference=options.reference,
    )

    try:
        content, page_count = _render_pdf(options.title, options.period, printed_at, kpis, tables)
    except ExportError:
        raise
    except Exception as e:
        logger.error("Error rendering PDF: %s", e)
        raise ExportError(f"PDF rendering failed: {e}") from e

    filename = report_filename(printed_at.date())
    logger.info(
        "Rendered %s: %d transactions, %d tables, %d pages",
        filename,
        len(filtered),
        len(tables),
        page_count,
    )
    return ExportArtifact(content=content, filename=filename, page_count=page_count)


def export_sales_report(
    report: SalesReport,
    sections: Optional[Sequence[Section | str]] = None,
    printed_at: Optional[datetime] = None,
) -> ExportArtifact:
    """Render a ``SalesReport`` with its title, period and snapshot."""
    result = report.result
    options = ExportOptions(
        title=report.config.title,
        period=report.period,
        sections=sections,
        dimensions=report.config.dimensions,
        reference=report.snapshot,
        printed_at=printed_at,
    )
    return export_report(result.filtered, result.rollups, result.kpis, options)
