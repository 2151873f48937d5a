"""
Reconciliation session host.
Drives the load, reconcile and export workflow against an immutable AppState.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from ..config import ReconConfig
from ..matching.engine import ReconciliationEngine
from ..models.record import BUCKETS, ReconciliationResult, Source
from ..parsers.base import ParseOutcome, RecordParser
from ..parsers.csv_parser import CsvRecordParser
from ..reports.csv_exporter import CsvExporter, ExportOutcome, RecordSerializer
from ..utils.exceptions import ExportError
from .state import (
    Action,
    AppState,
    FileCleared,
    FileLoadFailed,
    FileLoadStarted,
    FileLoaded,
    MessagePosted,
    ReconcileFailed,
    ReconcileFinished,
    ReconcileRequested,
    reduce,
)

logger = logging.getLogger(__name__)


class ReconciliationSession:
    """
    One user's reconciliation workflow.

    Collaborators are injected so the session can run against any parser or
    exporter. Failures from collaborators end up in ``state.message``; none of
    the workflow methods raise for bad input data.
    """

    def __init__(
        self,
        config: Optional[ReconConfig] = None,
        parser: Optional[RecordParser] = None,
        exporter: Optional[RecordSerializer] = None,
        engine: Optional[ReconciliationEngine] = None,
    ):
        self.config = config or ReconConfig()
        self.parser = parser or CsvRecordParser(self.config)
        self.exporter = exporter or CsvExporter()
        self.engine = engine or ReconciliationEngine(self.config)
        self._state = AppState()

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = reduce(self._state, action)
        logger.debug(f"{type(action).__name__}: {self._state.message}")
        return self._state

    def load_file(self, side: Source, file_path: Path) -> AppState:
        """
        Load one side from a CSV file.

        Args:
            side: Which input the file provides
            file_path: Path to the CSV file

        Returns:
            State after the load finished or failed
        """
        self.dispatch(FileLoadStarted(side, file_path.name))
        return self._finish_load(side, file_path.name, self.parser.parse_file(file_path))

    def load_text(self, side: Source, file_name: str, text: str) -> AppState:
        """Load one side from CSV text already in memory."""
        self.dispatch(FileLoadStarted(side, file_name))
        return self._finish_load(side, file_name, self.parser.parse(text))

    def _finish_load(self, side: Source, file_name: str, outcome: ParseOutcome) -> AppState:
        if outcome.ok:
            return self.dispatch(FileLoaded(side, file_name, tuple(outcome.records)))
        logger.warning(f"Could not parse {file_name}: {outcome.error}")
        return self.dispatch(FileLoadFailed(side, file_name, outcome.error or "unknown error"))

    def clear(self, side: Source) -> AppState:
        return self.dispatch(FileCleared(side))

    def reconcile(self) -> Optional[ReconciliationResult]:
        """
        Reconcile the loaded inputs.

        Returns:
            The new result, or None when the request was refused (busy, or an
            input is empty). The reason is left in ``state.message``.

        Raises:
            Exception: Whatever the engine raised, after the busy flag is
                released and the error posted to ``state.message``
        """
        if self._state.is_loading:
            logger.info("Reconciliation requested while busy; ignoring")
            return None

        self.dispatch(ReconcileRequested())
        if not self._state.is_loading:
            return None

        internal = self._state.internal
        provider = self._state.provider

        try:
            start_time = datetime.now()
            result = self.engine.reconcile(internal.records, provider.records)
            processing_time = (datetime.now() - start_time).total_seconds()

            summary = self.engine.generate_summary(
                internal=internal.records,
                provider=provider.records,
                result=result,
                internal_filename=internal.file_name or "",
                provider_filename=provider.file_name or "",
                processing_time=processing_time,
            )
        except Exception as e:
            logger.exception("Reconciliation failed")
            self.dispatch(ReconcileFailed(str(e)))
            raise

        self.dispatch(ReconcileFinished(result, summary))
        return result

    def export(self, bucket: str, output_path: Path) -> ExportOutcome:
        """
        Export one result bucket to CSV.

        Args:
            bucket: ``matched``, ``only_internal`` or ``only_provider``
            output_path: Destination file

        Returns:
            Export outcome; its message is also posted to the state
        """
        results = self._state.results
        records = results.bucket(bucket) if results else ()

        try:
            outcome = self.exporter.export(records, output_path)
        except ExportError as e:
            outcome = ExportOutcome(path=None, message=f"Error exporting {output_path.name}: {e}")

        self.dispatch(MessagePosted(outcome.message))
        return outcome

    def export_all(self, output_dir: Path) -> list[ExportOutcome]:
        """Export every bucket using the configured file names."""
        filenames = self.config.output.filenames
        return [
            self.export(bucket, output_dir / getattr(filenames, bucket)) for bucket in BUCKETS
        ]
