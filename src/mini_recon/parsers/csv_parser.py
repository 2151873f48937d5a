"""
CSV record parser.
Reads internal ledger and provider statement exports into raw-text records.
"""

from io import StringIO
from pathlib import Path
from typing import Optional, Union
import logging

import pandas as pd

from ..models.record import Record
from ..config import ReconConfig
from ..utils.exceptions import CsvParseError
from .base import ParseOutcome, RecordParser

logger = logging.getLogger(__name__)


class CsvRecordParser(RecordParser):
    """
    Parser for reconciliation CSV files.

    The first row supplies the field names for every following row. Blank
    lines are skipped and every cell is kept as text, so ``"100.00"`` stays
    ``"100.00"`` and an empty cell stays ``""``. Rows shorter than the header
    simply lack the trailing fields.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        csv_config = (config or ReconConfig()).input.csv
        self.encoding = csv_config.encoding
        self.delimiter = csv_config.delimiter

    def load(self, file_path: Path) -> list[Record]:
        """
        Parse a CSV file and return its records.

        Args:
            file_path: Path to the CSV file

        Returns:
            Records in file row order

        Raises:
            CsvParseError: If the file cannot be read or parsed
        """
        logger.info(f"Parsing CSV file: {file_path}")
        records = self._to_records(self._read_frame(file_path))
        logger.info(f"Extracted {len(records)} records from {file_path.name}")
        return records

    def parse_file(self, file_path: Path) -> ParseOutcome:
        try:
            return ParseOutcome(records=self.load(file_path))
        except CsvParseError as e:
            return ParseOutcome(error=str(e))

    def parse(self, text: str) -> ParseOutcome:
        """
        Parse CSV text.

        Args:
            text: CSV file contents

        Returns:
            Parse outcome holding records or an error message
        """
        try:
            records = self._to_records(self._read_frame(StringIO(text.lstrip("\ufeff"))))
        except CsvParseError as e:
            return ParseOutcome(error=str(e))
        logger.debug(f"Parsed {len(records)} records from CSV text")
        return ParseOutcome(records=records)

    def _read_frame(self, source: Union[Path, StringIO]) -> pd.DataFrame:
        """
        Read CSV data into a text-valued DataFrame.

        The python engine pads short rows with ``None`` where the C engine
        pads with ``""``, which keeps padding apart from genuinely empty cells.
        Repeated header names get pandas' ``.1``, ``.2`` suffixes.

        Args:
            source: File path or text buffer

        Returns:
            DataFrame with one object column per header field

        Raises:
            CsvParseError: If reading fails
        """
        try:
            return pd.read_csv(
                source,
                engine="python",
                encoding=self.encoding,
                sep=self.delimiter,
                dtype=object,
                na_filter=False,
                skip_blank_lines=True,
                index_col=False,
            )
        except pd.errors.EmptyDataError as e:
            raise CsvParseError(f"File is empty: {e}") from e
        except (pd.errors.ParserError, UnicodeDecodeError, OSError, ValueError) as e:
            logger.error(f"Failed to read CSV data: {e}")
            raise CsvParseError(str(e)) from e

    def _to_records(self, df: pd.DataFrame) -> list[Record]:
        """
        Convert DataFrame rows to records.

        Cells pandas pads onto short rows are dropped, leaving the field
        absent from that record.
        """
        return [
            {str(name): value for name, value in row.items() if not pd.isna(value)}
            for row in df.to_dict(orient="records")
        ]
