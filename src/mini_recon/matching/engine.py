"""
Reference-keyed reconciliation engine.
Partitions internal and provider records into matched, internal-only and
provider-only buckets, annotating matched records with per-field flags.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence
import logging

from ..models.record import (
    COMPARED_FIELDS,
    REFERENCE_FIELD,
    Record,
    ReconciliationResult,
    ReconciliationSummary,
    ReferenceDiagnostics,
    Source,
)
from ..config import ReconConfig

logger = logging.getLogger(__name__)


def index_by_reference(
    records: Iterable[Record], reference_field: str = REFERENCE_FIELD
) -> dict[Optional[str], Record]:
    """
    Index records by their reference value.

    A later record with the same reference replaces the earlier one but keeps
    the position where the reference was first seen. Records without the
    reference field are indexed under ``None``.
    """
    index: dict[Optional[str], Record] = {}
    for record in records:
        index[record.get(reference_field)] = record
    return index


def annotate_match(
    internal: Record, provider: Record, compared_fields: Sequence[str] = COMPARED_FIELDS
) -> Record:
    """Copy an internal record and attach comparison flags against its provider counterpart."""
    matched = dict(internal)
    for name in compared_fields:
        # Raw text equality: "100" and "100.00" disagree
        matched[f"matched_{name}"] = internal.get(name) == provider.get(name)
    for name in compared_fields:
        matched[f"provider_{name}"] = provider.get(name)
    return matched


def reconcile(
    internal: Iterable[Record],
    provider: Iterable[Record],
    *,
    reference_field: str = REFERENCE_FIELD,
    compared_fields: Sequence[str] = COMPARED_FIELDS,
) -> ReconciliationResult:
    """
    Reconcile internal records against provider records.

    Args:
        internal: Internal ledger records, in source order
        provider: Provider statement records, in source order
        reference_field: Field joining the two collections
        compared_fields: Fields checked for equality on matched records

    Returns:
        A new ReconciliationResult; inputs are not modified
    """
    internal_index = index_by_reference(internal, reference_field)
    provider_index = index_by_reference(provider, reference_field)

    matched: list[Record] = []
    only_internal: list[Record] = []
    only_provider: list[Record] = []

    for reference, internal_record in internal_index.items():
        if reference in provider_index:
            matched.append(
                annotate_match(internal_record, provider_index[reference], compared_fields)
            )
        else:
            only_internal.append(internal_record)

    for reference, provider_record in provider_index.items():
        if reference not in internal_index:
            only_provider.append(provider_record)

    return ReconciliationResult(
        matched=tuple(matched),
        only_internal=tuple(only_internal),
        only_provider=tuple(only_provider),
    )


class ReconciliationEngine:
    """
    Configured front end to :func:`reconcile`.

    Applies the configured reference and compared fields and logs the run.
    The summary step reports reference-field data quality problems. Reporting
    never changes the partition: duplicates still collapse last-write-wins and
    rows without a reference still match each other.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration (defaults when omitted)
        """
        self.config = config or ReconConfig()
        self.reference_field = self.config.matching.reference_field
        self.compared_fields = tuple(self.config.matching.compared_fields)

    def reconcile(
        self,
        internal: Sequence[Record],
        provider: Sequence[Record],
    ) -> ReconciliationResult:
        """
        Perform reconciliation between internal and provider records.

        Args:
            internal: Internal ledger records
            provider: Provider statement records

        Returns:
            The partitioned, annotated result
        """
        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(internal)} internal records, "
            f"{len(provider)} provider records"
        )

        result = reconcile(
            internal,
            provider,
            reference_field=self.reference_field,
            compared_fields=self.compared_fields,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(result.matched)} matched, "
            f"{len(result.only_internal)} internal-only, "
            f"{len(result.only_provider)} provider-only"
        )

        return result

    def inspect_references(
        self, records: Sequence[Record], source: Source
    ) -> ReferenceDiagnostics:
        """
        Log rows without a reference and rows whose reference repeats.

        Args:
            records: Records from one side
            source: Which side they came from, for log messages

        Returns:
            Diagnostics for the collection
        """
        diagnostics = self.count_references(records)

        if diagnostics.missing_reference:
            logger.warning(
                f"{source.label}: {diagnostics.missing_reference} record(s) have no "
                f"'{self.reference_field}' field; they are matched under an empty reference"
            )
        if diagnostics.duplicate_references:
            logger.warning(
                f"{source.label}: {diagnostics.duplicate_references} record(s) repeat an "
                f"earlier '{self.reference_field}'; only the last occurrence is reconciled"
            )

        return diagnostics

    def generate_summary(
        self,
        internal: Sequence[Record],
        provider: Sequence[Record],
        result: ReconciliationResult,
        internal_filename: str = "",
        provider_filename: str = "",
        processing_time: float = 0.0,
    ) -> ReconciliationSummary:
        """
        Generate a summary of the reconciliation results.

        Reference diagnostics are counted here, once per input, and logged as warnings.

        Args:
            internal: All internal records
            provider: All provider records
            result: Result of reconciling them
            internal_filename: Name of the internal file
            provider_filename: Name of the provider file
            processing_time: Time taken in seconds

        Returns:
            Reconciliation summary object
        """
        field_mismatch_counts = {
            name: sum(1 for m in result.matched if not m.get(f"matched_{name}"))
            for name in self.compared_fields
        }
        mismatched_count = sum(
            1
            for m in result.matched
            if not all(m.get(f"matched_{name}") for name in self.compared_fields)
        )

        return ReconciliationSummary(
            internal_filename=internal_filename,
            provider_filename=provider_filename,
            reconciliation_date=datetime.now(),
            total_internal_records=len(internal),
            total_provider_records=len(provider),
            matched_count=len(result.matched),
            only_internal_count=len(result.only_internal),
            only_provider_count=len(result.only_provider),
            mismatched_count=mismatched_count,
            field_mismatch_counts=field_mismatch_counts,
            internal_diagnostics=self.inspect_references(internal, Source.INTERNAL),
            provider_diagnostics=self.inspect_references(provider, Source.PROVIDER),
            processing_time_seconds=processing_time,
            config_file_used=self.config.config_file_path,
        )

    def count_references(self, records: Sequence[Record]) -> ReferenceDiagnostics:
        """Count rows without a reference and rows whose reference repeats."""
        diagnostics = ReferenceDiagnostics(total=len(records))
        seen: set = set()

        for record in records:
            reference = record.get(self.reference_field)
            if reference is None:
                diagnostics.missing_reference += 1
            if reference in seen:
                diagnostics.duplicate_references += 1
            seen.add(reference)

        return diagnostics
