"""Data models for reconciliation."""

from .record import (
    BUCKETS,
    COMPARED_FIELDS,
    REFERENCE_FIELD,
    Record,
    ReconciliationResult,
    ReconciliationSummary,
    ReferenceDiagnostics,
    Source,
)

__all__ = [
    "BUCKETS",
    "COMPARED_FIELDS",
    "REFERENCE_FIELD",
    "Record",
    "ReconciliationResult",
    "ReconciliationSummary",
    "ReferenceDiagnostics",
    "Source",
]
