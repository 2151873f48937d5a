import pytest

from mini_recon.matching.engine import reconcile
from mini_recon.models.record import Source
from mini_recon.session.state import (
    CLEARED_MESSAGE,
    COMPLETE_MESSAGE,
    MISSING_INPUT_MESSAGE,
    RECONCILING_MESSAGE,
    AppState,
    FileCleared,
    FileLoadFailed,
    FileLoadStarted,
    FileLoaded,
    MessagePosted,
    ReconcileFailed,
    ReconcileFinished,
    ReconcileRequested,
    SourceFile,
    reduce,
)


def loaded_state(internal_records, provider_records) -> AppState:
    state = AppState()
    state = reduce(state, FileLoaded(Source.INTERNAL, "internal.csv", tuple(internal_records)))
    return reduce(state, FileLoaded(Source.PROVIDER, "provider.csv", tuple(provider_records)))


def test_initial_state():
    state = AppState()

    assert state.internal == SourceFile()
    assert state.results is None
    assert not state.is_loading
    assert not state.can_reconcile


def test_load_started_marks_busy_and_names_file():
    state = reduce(AppState(), FileLoadStarted(Source.INTERNAL, "ledger.csv"))

    assert state.is_loading
    assert state.message == "Loading ledger.csv..."
    assert state.internal.file_name == "ledger.csv"
    assert not state.can_reconcile


def test_file_loaded_stores_records(internal_records):
    start = AppState()
    state = reduce(start, FileLoaded(Source.INTERNAL, "ledger.csv", tuple(internal_records)))

    assert state.internal.records == tuple(internal_records)
    assert state.message == "ledger.csv loaded successfully."
    assert not state.is_loading
    # Reducer returns a new snapshot
    assert start.internal.records == ()


def test_file_load_failed_clears_side():
    state = reduce(AppState(), FileLoadStarted(Source.PROVIDER, "bad.csv"))
    state = reduce(state, FileLoadFailed(Source.PROVIDER, "bad.csv", "EOF inside string"))

    assert state.provider == SourceFile()
    assert not state.is_loading
    assert state.message == "Error parsing bad.csv: EOF inside string"


def test_can_reconcile_once_both_files_loaded(internal_records, provider_records):
    state = loaded_state(internal_records, provider_records)

    assert state.can_reconcile
    assert state.has_both_inputs


def test_reconcile_requested_without_inputs_posts_guard_message(internal_records):
    state = reduce(AppState(), FileLoaded(Source.INTERNAL, "ledger.csv", tuple(internal_records)))

    state = reduce(state, ReconcileRequested())

    assert state.message == MISSING_INPUT_MESSAGE
    assert not state.is_loading


def test_reconcile_requested_with_header_only_file_is_refused(internal_records):
    state = reduce(AppState(), FileLoaded(Source.INTERNAL, "ledger.csv", tuple(internal_records)))
    state = reduce(state, FileLoaded(Source.PROVIDER, "empty.csv", ()))

    state = reduce(state, ReconcileRequested())

    assert state.message == MISSING_INPUT_MESSAGE


def test_reconcile_requested_while_busy_is_ignored():
    busy = reduce(AppState(), FileLoadStarted(Source.INTERNAL, "ledger.csv"))

    assert reduce(busy, ReconcileRequested()) is busy


def test_reconcile_round_trip(internal_records, provider_records):
    state = loaded_state(internal_records, provider_records)

    state = reduce(state, ReconcileRequested())
    assert state.is_loading
    assert state.message == RECONCILING_MESSAGE

    result = reconcile(state.internal.records, state.provider.records)
    state = reduce(state, ReconcileFinished(result))

    assert state.results is result
    assert not state.is_loading
    assert state.message == COMPLETE_MESSAGE


def test_reconcile_failed_releases_busy_flag(internal_records, provider_records):
    state = reduce(loaded_state(internal_records, provider_records), ReconcileRequested())

    state = reduce(state, ReconcileFailed("boom"))

    assert not state.is_loading
    assert state.results is None
    assert state.message == "Error during reconciliation: boom"
    assert state.can_reconcile


def test_new_run_replaces_previous_results(internal_records, provider_records):
    state = loaded_state(internal_records, provider_records)
    first = reconcile(internal_records, provider_records)
    state = reduce(state, ReconcileFinished(first))

    second = reconcile(internal_records[:1], provider_records)
    state = reduce(state, ReconcileFinished(second))

    assert state.results is second
    assert len(first.only_internal) == 1


def test_clearing_a_file_drops_results(internal_records, provider_records):
    state = loaded_state(internal_records, provider_records)
    state = reduce(state, ReconcileFinished(reconcile(internal_records, provider_records)))

    state = reduce(state, FileCleared(Source.PROVIDER))

    assert state.provider == SourceFile()
    assert state.internal.file_name == "internal.csv"
    assert state.results is None
    assert state.message == CLEARED_MESSAGE


def test_message_posted():
    state = reduce(AppState(), MessagePosted("Exported matched.csv successfully."))

    assert state.message == "Exported matched.csv successfully."


def test_unknown_action_raises():
    with pytest.raises(TypeError):
        reduce(AppState(), object())
