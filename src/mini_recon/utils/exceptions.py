"""Custom exceptions for the reconciliation application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class CsvParseError(ReconciliationError):
    """Error reading a CSV file into records."""

    pass


class ExportError(ReconciliationError):
    """Error writing records to a CSV file."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
