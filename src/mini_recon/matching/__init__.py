"""Reconciliation engine."""

from .engine import ReconciliationEngine, annotate_match, index_by_reference, reconcile

__all__ = [
    "ReconciliationEngine",
    "annotate_match",
    "index_by_reference",
    "reconcile",
]
