"""Data export package."""

from budget_tracker.export.exporter import (
    CSV_COLUMNS,
    DataExporter,
    ExportError,
    ExportFormat,
    parse_format,
)

__all__ = ["CSV_COLUMNS", "DataExporter", "ExportError", "ExportFormat", "parse_format"]
