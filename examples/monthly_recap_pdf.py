"""Example: Monthly sales recap with PDF export

This example demonstrates how to build this month's sales recap from a local
snapshot, print it, and export it as a PDF with only the channel and payment
listings appended.

Prerequisites:
- A snapshot document at data/snapshot.json with the collections
  sales, customers, products, channels, payments and admins
"""

from pathlib import Path

from pos_recap import DataPaths
from pos_recap.data import JsonFileRepository
from pos_recap.export import export_sales_report, format_report_for_console, write_report
from pos_recap.reports import Preset, ReportConfig, build_sales_report

paths = DataPaths.from_root(Path("data"))
paths.ensure_dirs()

repo = JsonFileRepository.from_paths(paths)

# Build the recap for the current month
config = ReportConfig(preset=Preset.MONTHLY)
report = build_sales_report(repo, config)

print(format_report_for_console(report))

# Top channel by revenue (first one wins ties)
top = report.result.top("channel")
if top is not None:
    print(f"Top channel: {top.name} ({top.orders} orders)")

# Export with two supplementary listings
artifact = export_sales_report(report, sections=["channels", "payments"])
path = write_report(artifact, paths.exports)
print(f"Saved {path} ({artifact.page_count} pages)")
