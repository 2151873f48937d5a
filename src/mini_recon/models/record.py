"""Data models for reconciliation records and results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

# A parsed CSV row: header name -> raw cell text. Values are never coerced,
# and matched records additionally carry boolean flags and provider copies.
Record = dict[str, Any]

REFERENCE_FIELD = "transaction_reference"
COMPARED_FIELDS = ("amount", "status")
BUCKETS = ("matched", "only_internal", "only_provider")


class Source(Enum):
    """Which side of the reconciliation a collection came from."""

    INTERNAL = "internal"
    PROVIDER = "provider"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Three-way partition produced by a single reconciliation run.

    ``matched`` holds copies of the internal records annotated with
    ``matched_<field>`` flags and ``provider_<field>`` values. The two
    ``only_*`` buckets hold the input records as they were received.
    """

    matched: tuple[Record, ...] = ()
    only_internal: tuple[Record, ...] = ()
    only_provider: tuple[Record, ...] = ()

    def bucket(self, name: str) -> tuple[Record, ...]:
        """Look up a bucket by name (``matched``, ``only_internal``, ``only_provider``)."""
        if name not in BUCKETS:
            raise KeyError(f"Unknown result bucket: {name}")
        return getattr(self, name)


@dataclass
class ReferenceDiagnostics:
    """Data-quality counters for the reference field of one input collection."""

    total: int = 0
    missing_reference: int = 0
    duplicate_references: int = 0

    @property
    def indexed(self) -> int:
        """Rows left after duplicate references collapse onto one entry."""
        return self.total - self.duplicate_references


@dataclass
class ReconciliationSummary:
    """Summary of a reconciliation run."""

    # File information
    internal_filename: str
    provider_filename: str
    reconciliation_date: datetime

    # Record counts
    total_internal_records: int
    total_provider_records: int

    # Match results
    matched_count: int
    only_internal_count: int
    only_provider_count: int

    # Matched records that disagree on at least one compared field
    mismatched_count: int = 0

    # Compared field -> number of matched records disagreeing on it
    field_mismatch_counts: dict[str, int] = field(default_factory=dict)

    # Data quality
    internal_diagnostics: ReferenceDiagnostics = field(default_factory=ReferenceDiagnostics)
    provider_diagnostics: ReferenceDiagnostics = field(default_factory=ReferenceDiagnostics)

    # Processing metadata
    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None

    @property
    def fully_matched_count(self) -> int:
        """Matched records that agree on every compared field."""
        return self.matched_count - self.mismatched_count

    @property
    def match_rate_internal(self) -> float:
        """Percentage of indexed internal records that found a counterpart."""
        indexed = self.internal_diagnostics.indexed or self.total_internal_records
        if indexed == 0:
            return 0.0
        return (self.matched_count / indexed) * 100

    @property
    def match_rate_provider(self) -> float:
        """Percentage of indexed provider records that found a counterpart."""
        indexed = self.provider_diagnostics.indexed or self.total_provider_records
        if indexed == 0:
            return 0.0
        return (self.matched_count / indexed) * 100
