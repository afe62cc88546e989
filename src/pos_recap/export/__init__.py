"""Report rendering: shared tables, console text and PDF documents."""

from pos_recap.export.console import (
    console_safe,
    format_dashboard_for_console,
    format_report_for_console,
)
from pos_recap.export.pdf import (
    ExportArtifact,
    ExportOptions,
    export_report,
    export_sales_report,
    report_filename,
    write_report,
)
from pos_recap.export.tables import (
    ReportTable,
    Section,
    build_report_tables,
    detail_frame,
    summary_lines,
    write_detail_csv,
)

__all__ = [
    "ExportArtifact",
    "ExportOptions",
    "ReportTable",
    "Section",
    "build_report_tables",
    "console_safe",
    "detail_frame",
    "export_report",
    "export_sales_report",
    "format_dashboard_for_console",
    "format_report_for_console",
    "report_filename",
    "summary_lines",
    "write_detail_csv",
    "write_report",
]
