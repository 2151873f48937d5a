"""
CSV exporter for reconciliation buckets.
Serializes records back to CSV text and writes per-bucket files.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence
import logging

import pandas as pd

from ..models.record import Record
from ..utils.exceptions import ExportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportOutcome:
    """Where the export landed (``None`` when nothing was written) and a user-facing message."""

    path: Optional[Path]
    message: str

    @property
    def written(self) -> bool:
        return self.path is not None


class RecordSerializer(ABC):
    """Abstract base class for record serializers."""

    @abstractmethod
    def serialize(self, records: Sequence[Record]) -> str:
        """
        Serialize records to text.

        Args:
            records: Records to serialize

        Returns:
            Serialized text
        """
        pass

    @abstractmethod
    def export(self, records: Sequence[Record], output_path: Path) -> ExportOutcome:
        """
        Write records to a file.

        Args:
            records: Records to export
            output_path: Destination file

        Returns:
            Export outcome; an empty collection writes nothing

        Raises:
            ExportError: If the file cannot be written
        """
        pass


def format_value(value: Any) -> str:
    """Render a record value as CSV cell text; flags become ``true``/``false``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CsvExporter(RecordSerializer):
    """
    Writes records as CSV.

    The header is the keys of the first record, in insertion order. Later
    records missing one of those keys get an empty cell; keys that only
    appear in later records are not written.
    """

    def __init__(self, line_terminator: str = "\r\n"):
        self.line_terminator = line_terminator

    def serialize(self, records: Sequence[Record]) -> str:
        if not records:
            return ""

        fields = list(records[0].keys())
        rows = [[format_value(record.get(name)) for name in fields] for record in records]
        df = pd.DataFrame(rows, columns=fields, dtype=str)
        return df.to_csv(index=False, lineterminator=self.line_terminator)

    def export(self, records: Sequence[Record], output_path: Path) -> ExportOutcome:
        """
        Write records to a CSV file.

        Args:
            records: Records to export
            output_path: Destination file

        Returns:
            Export outcome; an empty collection writes nothing

        Raises:
            ExportError: If the file cannot be written
        """
        filename = output_path.name
        if not records:
            logger.info(f"Skipping export of {filename}: no records")
            return ExportOutcome(path=None, message=f"No data to export for {filename}.")

        csv_text = self.serialize(records)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            # newline="" keeps the serializer's line terminator as-is
            with open(output_path, "w", encoding="utf-8", newline="") as f:
                f.write(csv_text)
        except OSError as e:
            logger.error(f"Failed to write {output_path}: {e}")
            raise ExportError(f"Failed to write {output_path}: {e}") from e

        logger.info(f"Exported {len(records)} records to {output_path}")
        return ExportOutcome(path=output_path, message=f"Exported {filename} successfully.")
