"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    CsvParseError,
    ExportError,
    ConfigurationError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "CsvParseError",
    "ExportError",
    "ConfigurationError",
    "ReportGenerationError",
    "setup_logging",
]
