"""Interactive reconciliation session: immutable state and its host."""

from .controller import ReconciliationSession
from .state import AppState, SourceFile, reduce

__all__ = ["AppState", "ReconciliationSession", "SourceFile", "reduce"]
