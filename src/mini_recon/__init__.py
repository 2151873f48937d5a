"""Two-way reconciliation of internal ledger and provider statement CSV files."""

__version__ = "0.1.0"
