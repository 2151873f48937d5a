"""
Excel report generator for reconciliation results.
Creates a workbook with a summary sheet and one sheet per result bucket.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence
import logging

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE, Cell
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..models.record import Record, ReconciliationResult, ReconciliationSummary
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
MISMATCH_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

MATCH_LABEL = "✅ Match"
MISMATCH_LABEL = "❌ Mismatch"


def match_label(flag: Any) -> str:
    return MATCH_LABEL if flag else MISMATCH_LABEL


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.reference_field = self.config.matching.reference_field
        self.compared_fields = list(self.config.matching.compared_fields)

    def default_filename(self, when: Optional[datetime] = None) -> str:
        """Fill the configured filename template with a date and time stamp."""
        when = when or datetime.now()
        return self.config.output.excel.filename_template.format(
            date=when.strftime("%Y%m%d"), time=when.strftime("%H%M%S")
        )

    def generate_report(
        self,
        summary: ReconciliationSummary,
        result: ReconciliationResult,
        output_path: Path,
    ) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            summary: Reconciliation summary
            result: Reconciliation result
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be saved
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        self._create_summary_sheet(wb, summary)
        self._create_matched_sheet(wb, result.matched)
        self._create_unmatched_sheet(wb, "Only in Internal", result.only_internal)
        self._create_unmatched_sheet(wb, "Only in Provider", result.only_provider)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(self, wb: Workbook, summary: ReconciliationSummary) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet("Summary")

        ws["A1"] = "Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        sections: list[tuple[str, list[tuple[str, Any]]]] = [
            (
                "File Information",
                [
                    ("Internal File:", summary.internal_filename),
                    ("Provider File:", summary.provider_filename),
                    (
                        "Reconciliation Date:",
                        summary.reconciliation_date.strftime("%Y-%m-%d %H:%M:%S"),
                    ),
                    ("Config File:", summary.config_file_used or "Default"),
                ],
            ),
            (
                "Record Counts",
                [
                    ("Total Internal Records:", summary.total_internal_records),
                    ("Total Provider Records:", summary.total_provider_records),
                    ("Matched:", summary.matched_count),
                    ("Fully Matched:", summary.fully_matched_count),
                    ("With Mismatches:", summary.mismatched_count),
                    ("Only in Internal:", summary.only_internal_count),
                    ("Only in Provider:", summary.only_provider_count),
                ],
            ),
            (
                "Field Mismatches",
                [
                    (f"{name.capitalize()} Mismatches:", count)
                    for name, count in summary.field_mismatch_counts.items()
                ],
            ),
            (
                "Match Rates",
                [
                    ("Internal Match Rate:", f"{summary.match_rate_internal:.1f}%"),
                    ("Provider Match Rate:", f"{summary.match_rate_provider:.1f}%"),
                ],
            ),
            (
                "Data Quality",
                [
                    (
                        "Internal Missing Reference:",
                        summary.internal_diagnostics.missing_reference,
                    ),
                    (
                        "Internal Duplicate References:",
                        summary.internal_diagnostics.duplicate_references,
                    ),
                    (
                        "Provider Missing Reference:",
                        summary.provider_diagnostics.missing_reference,
                    ),
                    (
                        "Provider Duplicate References:",
                        summary.provider_diagnostics.duplicate_references,
                    ),
                    ("Processing Time:", f"{summary.processing_time_seconds:.2f} seconds"),
                ],
            ),
        ]

        row = 3
        for title, rows in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in rows:
                ws[f"A{row}"] = label
                _write(ws, row, 2, value)
                row += 1
            row += 1

        ws.column_dimensions["A"].width = 32
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(self, wb: Workbook, matched: Sequence[Record]) -> None:
        """Create the matched records sheet, one internal/provider/flag triple per compared field."""
        ws = wb.create_sheet("Matched")

        headers = ["Reference"]
        for name in self.compared_fields:
            label = name.replace("_", " ").title()
            headers += [f"Internal {label}", f"Provider {label}", f"{label} Match"]
        self._write_headers(ws, headers)

        for row_num, record in enumerate(matched, start=2):
            _write(ws, row_num, 1, record.get(self.reference_field)).border = THIN_BORDER

            col = 2
            for name in self.compared_fields:
                flag = record.get(f"matched_{name}")
                values = [
                    record.get(name),
                    record.get(f"provider_{name}"),
                    match_label(flag),
                ]
                for value in values:
                    cell = _write(ws, row_num, col, value)
                    cell.border = THIN_BORDER
                    cell.fill = MATCH_FILL if flag else MISMATCH_FILL
                    col += 1

        self._auto_fit_columns(ws)

    def _create_unmatched_sheet(
        self, wb: Workbook, title: str, records: Sequence[Record]
    ) -> None:
        """Create a sheet listing records without a counterpart."""
        ws = wb.create_sheet(title)

        fields = [self.reference_field] + self.compared_fields
        headers = ["Reference"] + [name.replace("_", " ").title() for name in self.compared_fields]
        self._write_headers(ws, headers)

        for row_num, record in enumerate(records, start=2):
            for col, name in enumerate(fields, start=1):
                cell = _write(ws, row_num, col, record.get(name))
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column_cells[0].column_letter].width = min(max_length + 2, 50)


def _cell(value: Any) -> str:
    # "100" and "100.00" stay distinguishable; control characters are not allowed in sheets
    return "" if value is None else ILLEGAL_CHARACTERS_RE.sub("", str(value))


def _write(ws: Worksheet, row: int, column: int, value: Any) -> Cell:
    """Write a value; anything but a number is stored as text, even when it starts with ``=``."""
    if not isinstance(value, (int, float)):
        value = _cell(value)
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str):
        cell.data_type = "s"
    return cell
