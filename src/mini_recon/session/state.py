"""
Application state for an interactive reconciliation session.

State is an immutable snapshot. Every user-visible change goes through
:func:`reduce`, which takes the current snapshot and one action and returns
the next snapshot. Parsing and reconciling happen outside the reducer; their
outcomes arrive as actions.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from ..models.record import Record, ReconciliationResult, ReconciliationSummary, Source

MISSING_INPUT_MESSAGE = "Please upload both Internal and Provider CSV files to reconcile."
CLEARED_MESSAGE = "File cleared. Please upload new files to reconcile."
RECONCILING_MESSAGE = "Reconciling data..."
COMPLETE_MESSAGE = "Reconciliation complete!"


@dataclass(frozen=True)
class SourceFile:
    """One uploaded input: its file name and parsed records."""

    file_name: Optional[str] = None
    records: tuple[Record, ...] = ()

    @property
    def loaded(self) -> bool:
        return self.file_name is not None


@dataclass(frozen=True)
class AppState:
    internal: SourceFile = field(default_factory=SourceFile)
    provider: SourceFile = field(default_factory=SourceFile)
    results: Optional[ReconciliationResult] = None
    summary: Optional[ReconciliationSummary] = None
    is_loading: bool = False
    message: str = ""

    def source(self, side: Source) -> SourceFile:
        return self.internal if side is Source.INTERNAL else self.provider

    @property
    def can_reconcile(self) -> bool:
        """Whether the reconcile action is currently offered."""
        return not self.is_loading and self.internal.loaded and self.provider.loaded

    @property
    def has_both_inputs(self) -> bool:
        return bool(self.internal.records) and bool(self.provider.records)


@dataclass(frozen=True)
class FileLoadStarted:
    side: Source
    file_name: str


@dataclass(frozen=True)
class FileLoaded:
    side: Source
    file_name: str
    records: tuple[Record, ...]


@dataclass(frozen=True)
class FileLoadFailed:
    side: Source
    file_name: str
    error: str


@dataclass(frozen=True)
class FileCleared:
    side: Source


@dataclass(frozen=True)
class ReconcileRequested:
    pass


@dataclass(frozen=True)
class ReconcileFinished:
    results: ReconciliationResult
    summary: Optional[ReconciliationSummary] = None


@dataclass(frozen=True)
class ReconcileFailed:
    error: str


@dataclass(frozen=True)
class MessagePosted:
    """A plain status message, e.g. the outcome of an export."""

    message: str


Action = Union[
    FileLoadStarted,
    FileLoaded,
    FileLoadFailed,
    FileCleared,
    ReconcileRequested,
    ReconcileFinished,
    ReconcileFailed,
    MessagePosted,
]


def _with_source(state: AppState, side: Source, source: SourceFile, **changes) -> AppState:
    key = "internal" if side is Source.INTERNAL else "provider"
    return replace(state, **{key: source}, **changes)


def reduce(state: AppState, action: Action) -> AppState:
    """
    Compute the state that follows ``action``.

    Args:
        state: Current state
        action: Action to apply

    Returns:
        The next state; ``state`` itself is never modified

    Raises:
        TypeError: If the action type is unknown
    """
    if isinstance(action, FileLoadStarted):
        current = state.source(action.side)
        return _with_source(
            state,
            action.side,
            replace(current, file_name=action.file_name),
            is_loading=True,
            message=f"Loading {action.file_name}...",
        )

    if isinstance(action, FileLoaded):
        return _with_source(
            state,
            action.side,
            SourceFile(file_name=action.file_name, records=tuple(action.records)),
            is_loading=False,
            message=f"{action.file_name} loaded successfully.",
        )

    if isinstance(action, FileLoadFailed):
        return _with_source(
            state,
            action.side,
            SourceFile(),
            is_loading=False,
            message=f"Error parsing {action.file_name}: {action.error}",
        )

    if isinstance(action, FileCleared):
        return _with_source(
            state,
            action.side,
            SourceFile(),
            results=None,
            summary=None,
            message=CLEARED_MESSAGE,
        )

    if isinstance(action, ReconcileRequested):
        if state.is_loading:
            return state
        if not state.has_both_inputs:
            return replace(state, message=MISSING_INPUT_MESSAGE)
        return replace(state, is_loading=True, message=RECONCILING_MESSAGE)

    if isinstance(action, ReconcileFinished):
        return replace(
            state,
            results=action.results,
            summary=action.summary,
            is_loading=False,
            message=COMPLETE_MESSAGE,
        )

    if isinstance(action, ReconcileFailed):
        return replace(
            state,
            is_loading=False,
            message=f"Error during reconciliation: {action.error}",
        )

    if isinstance(action, MessagePosted):
        return replace(state, message=action.message)

    raise TypeError(f"Unknown action: {action!r}")
