import dataclasses
import logging

import pytest

from mini_recon.config import ReconConfig
from mini_recon.matching.engine import ReconciliationEngine, index_by_reference, reconcile
from mini_recon.models.record import ReconciliationResult, Source


def test_reconcile_partitions_records(internal_records, provider_records):
    result = reconcile(internal_records, provider_records)

    assert [r["transaction_reference"] for r in result.matched] == ["T1", "T2"]
    assert [r["transaction_reference"] for r in result.only_internal] == ["T3"]
    assert [r["transaction_reference"] for r in result.only_provider] == ["T4"]


def test_partition_covers_every_record(internal_records, provider_records):
    result = reconcile(internal_records, provider_records)

    assert len(result.matched) + len(result.only_internal) == len(internal_records)
    assert len(result.matched) + len(result.only_provider) == len(provider_records)

    internal_refs = {r["transaction_reference"] for r in internal_records}
    provider_refs = {r["transaction_reference"] for r in provider_records}
    matched_refs = {r["transaction_reference"] for r in result.matched}
    assert matched_refs == internal_refs & provider_refs
    assert {r["transaction_reference"] for r in result.only_internal} == internal_refs - provider_refs
    assert {r["transaction_reference"] for r in result.only_provider} == provider_refs - internal_refs


def test_match_flags_follow_exact_text_equality(internal_records, provider_records):
    result = reconcile(internal_records, provider_records)
    provider_by_ref = {r["transaction_reference"]: r for r in provider_records}

    for entry in result.matched:
        counterpart = provider_by_ref[entry["transaction_reference"]]
        assert entry["matched_amount"] == (entry["amount"] == counterpart["amount"])
        assert entry["matched_status"] == (entry["status"] == counterpart["status"])
        assert entry["provider_amount"] == counterpart["amount"]
        assert entry["provider_status"] == counterpart["status"]


def test_exact_mismatch_detection():
    internal = [{"transaction_reference": "T1", "amount": "100", "status": "settled"}]
    provider = [{"transaction_reference": "T1", "amount": "100.00", "status": "settled"}]

    (entry,) = reconcile(internal, provider).matched

    assert entry["matched_amount"] is False
    assert entry["matched_status"] is True


def test_comparison_does_not_trim_or_fold_case():
    internal = [{"transaction_reference": "T1", "amount": "5", "status": "Settled"}]
    provider = [{"transaction_reference": "T1", "amount": " 5", "status": "settled"}]

    (entry,) = reconcile(internal, provider).matched

    assert entry["matched_amount"] is False
    assert entry["matched_status"] is False


def test_matched_record_copies_internal_fields_and_appends_flags(internal_records, provider_records):
    result = reconcile(internal_records, provider_records)
    entry = result.matched[0]

    assert list(entry.keys()) == [
        "transaction_reference",
        "amount",
        "status",
        "customer",
        "matched_amount",
        "matched_status",
        "provider_amount",
        "provider_status",
    ]
    assert entry["customer"] == "Acme"
    # Inputs are left untouched
    assert "matched_amount" not in internal_records[0]
    assert entry is not internal_records[0]


def test_unmatched_records_are_passed_through_unmodified(internal_records, provider_records):
    result = reconcile(internal_records, provider_records)

    assert result.only_internal[0] == internal_records[2]
    assert result.only_provider[0] == provider_records[2]


def test_disjoint_sets():
    internal = [{"transaction_reference": "A", "amount": "10", "status": "settled"}]
    provider = [{"transaction_reference": "B", "amount": "20", "status": "pending"}]

    result = reconcile(internal, provider)

    assert result.matched == ()
    assert result.only_internal == (internal[0],)
    assert result.only_provider == (provider[0],)


def test_duplicate_reference_last_write_wins():
    internal = [
        {"transaction_reference": "X", "amount": "1"},
        {"transaction_reference": "X", "amount": "2"},
    ]
    provider = [{"transaction_reference": "X", "amount": "2", "status": "ok"}]

    result = reconcile(internal, provider)

    assert len(result.matched) == 1
    assert result.matched[0]["amount"] == "2"
    assert result.matched[0]["matched_amount"] is True
    assert result.only_internal == ()


def test_duplicate_reference_keeps_first_seen_position():
    internal = [
        {"transaction_reference": "A", "amount": "1"},
        {"transaction_reference": "B", "amount": "2"},
        {"transaction_reference": "A", "amount": "3"},
    ]

    index = index_by_reference(internal)

    assert list(index.keys()) == ["A", "B"]
    assert index["A"]["amount"] == "3"


def test_output_order_follows_input_order():
    internal = [{"transaction_reference": ref} for ref in ["C", "A", "B", "Z"]]
    provider = [{"transaction_reference": ref} for ref in ["Y", "B", "C", "X"]]

    result = reconcile(internal, provider)

    assert [r["transaction_reference"] for r in result.matched] == ["C", "B"]
    assert [r["transaction_reference"] for r in result.only_internal] == ["A", "Z"]
    assert [r["transaction_reference"] for r in result.only_provider] == ["Y", "X"]


def test_records_without_reference_match_each_other():
    internal = [{"amount": "10", "status": "settled"}]
    provider = [{"amount": "99", "status": "settled"}]

    result = reconcile(internal, provider)

    assert len(result.matched) == 1
    assert result.matched[0]["matched_amount"] is False
    assert result.matched[0]["matched_status"] is True


def test_missing_compared_fields_count_as_equal():
    internal = [{"transaction_reference": "T1"}]
    provider = [{"transaction_reference": "T1"}]

    (entry,) = reconcile(internal, provider).matched

    assert entry["matched_amount"] is True
    assert entry["matched_status"] is True
    assert entry["provider_amount"] is None
    assert entry["provider_status"] is None


def test_reconcile_is_deterministic(internal_records, provider_records):
    first = reconcile(internal_records, provider_records)
    second = reconcile(internal_records, provider_records)

    assert first == second


def test_result_is_a_fresh_immutable_value(internal_records, provider_records):
    result = reconcile(internal_records, provider_records)

    assert isinstance(result, ReconciliationResult)
    assert isinstance(result.matched, tuple)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.matched = ()


def test_engine_uses_configured_fields():
    config = ReconConfig(
        matching={"reference_field": "ref", "compared_fields": ["currency"]}
    )
    engine = ReconciliationEngine(config)

    result = engine.reconcile(
        [{"ref": "1", "currency": "USD", "amount": "1"}],
        [{"ref": "1", "currency": "EUR", "amount": "1"}],
    )

    (entry,) = result.matched
    assert entry["matched_currency"] is False
    assert entry["provider_currency"] == "EUR"
    assert "matched_amount" not in entry


def test_engine_warns_about_duplicates_and_missing_references(caplog):
    engine = ReconciliationEngine()
    internal = [
        {"transaction_reference": "A"},
        {"transaction_reference": "A"},
        {"amount": "1"},
    ]

    with caplog.at_level(logging.WARNING, logger="mini_recon"):
        diagnostics = engine.inspect_references(internal, Source.INTERNAL)

    assert diagnostics.total == 3
    assert diagnostics.duplicate_references == 1
    assert diagnostics.missing_reference == 1
    assert diagnostics.indexed == 2
    assert "only the last occurrence" in caplog.text
    assert "no 'transaction_reference' field" in caplog.text


def test_generate_summary_counts(internal_records, provider_records):
    engine = ReconciliationEngine()
    result = engine.reconcile(internal_records, provider_records)

    summary = engine.generate_summary(
        internal_records,
        provider_records,
        result,
        internal_filename="internal.csv",
        provider_filename="provider.csv",
    )

    assert summary.matched_count == 2
    assert summary.only_internal_count == 1
    assert summary.only_provider_count == 1
    # T1 differs on amount text, T2 differs on status
    assert summary.field_mismatch_counts == {"amount": 1, "status": 1}
    assert summary.mismatched_count == 2
    assert summary.fully_matched_count == 0
    assert round(summary.match_rate_internal, 1) == 66.7
    assert summary.internal_filename == "internal.csv"


def test_reference_diagnostics_counted_once_per_input(monkeypatch, caplog):
    engine = ReconciliationEngine()
    internal = [{"transaction_reference": "A"}, {"transaction_reference": "A"}]
    provider = [{"transaction_reference": "A"}]
    calls = []
    count_references = engine.count_references

    def counting(records):
        calls.append(records)
        return count_references(records)

    monkeypatch.setattr(engine, "count_references", counting)

    with caplog.at_level(logging.WARNING, logger="mini_recon"):
        result = engine.reconcile(internal, provider)
        summary = engine.generate_summary(internal, provider, result)

    assert calls == [internal, provider]
    assert caplog.text.count("only the last occurrence") == 1
    assert summary.internal_diagnostics.duplicate_references == 1
