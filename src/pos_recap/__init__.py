"""POS Recap - sales recap reports for a point-of-sale system.

This package turns a snapshot of POS sales and reference data into period
recaps, on screen and as PDF documents:

- **data**: repositories (JSON snapshot, REST API) and normalized records
- **reports**: date windows, filtering, KPIs, per-dimension rollups, dashboard
- **export**: shared report tables, console text, PDF and CSV output

Module Structure:
    pos_recap.data: Snapshot repositories and record normalization
    pos_recap.reports: Window resolution, aggregation and the report API
    pos_recap.export: Console, PDF and CSV rendering
    pos_recap.config: DataPaths configuration
    pos_recap.cli: ``pos-recap`` command

Quick Start:
    >>> from pos_recap import DataPaths
    >>> from pos_recap.data import JsonFileRepository
    >>> from pos_recap.reports import Preset, ReportConfig, build_sales_report
    >>> from pos_recap.export import export_sales_report, write_report
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> repo = JsonFileRepository.from_paths(paths)
    >>>
    >>> report = build_sales_report(repo, ReportConfig(preset=Preset.MONTHLY))
    >>> print(report.result.kpis)
    >>>
    >>> artifact = export_sales_report(report)
    >>> write_report(artifact, paths.exports)
"""

__version__ = "0.1.0"

from pos_recap.config import DataPaths
from pos_recap.exceptions import (
    ConfigError,
    DataQualityError,
    ExportError,
    PosRecapError,
    RepositoryError,
)

__all__ = [
    "ConfigError",
    "DataPaths",
    "DataQualityError",
    "ExportError",
    "PosRecapError",
    "RepositoryError",
    "__version__",
]
