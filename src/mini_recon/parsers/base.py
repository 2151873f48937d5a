"""
Parser interface for turning raw tabular text into records.
The session depends on this interface rather than a concrete CSV library.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..models.record import Record


@dataclass(frozen=True)
class ParseOutcome:
    """Either the parsed records or a description of why parsing failed."""

    records: list[Record] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RecordParser(ABC):
    """Abstract base class for record parsers."""

    @abstractmethod
    def parse(self, text: str) -> ParseOutcome:
        """
        Parse text into records.

        Implementations report failures through ``ParseOutcome.error`` and
        must not raise.

        Args:
            text: Raw file contents

        Returns:
            Parse outcome holding records or an error message
        """
        pass

    @abstractmethod
    def parse_file(self, file_path: Path) -> ParseOutcome:
        """Parse a file on disk into records, reporting failures like :meth:`parse`."""
        pass
