"""Parsers for reconciliation input files."""

from .base import ParseOutcome, RecordParser
from .csv_parser import CsvRecordParser

__all__ = ["CsvRecordParser", "ParseOutcome", "RecordParser"]
