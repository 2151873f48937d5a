"""Report and export writers."""

from .csv_exporter import CsvExporter, ExportOutcome, RecordSerializer, format_value
from .excel_generator import ExcelReportGenerator

__all__ = [
    "CsvExporter",
    "ExcelReportGenerator",
    "ExportOutcome",
    "RecordSerializer",
    "format_value",
]
