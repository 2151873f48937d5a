"""
Command-line interface for the mini reconciliation tool.
"""

from pathlib import Path
from typing import Optional, Sequence
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config, ReconConfig
from .models.record import Record, ReconciliationSummary, Source
from .parsers.csv_parser import CsvRecordParser
from .reports.excel_generator import ExcelReportGenerator, match_label
from .session.controller import ReconciliationSession
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__)
def main():
    """Internal ledger vs provider statement reconciliation tool."""
    pass


@main.command()
@click.argument("internal_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("provider_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for exported CSV files and the Excel report",
)
@click.option(
    "--excel/--no-excel", default=None, help="Write (or skip) the Excel report"
)
@click.option(
    "--rows", type=int, default=20, show_default=True, help="Rows shown per result table"
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Show results without writing any files")
def reconcile(
    internal_file: Path,
    provider_file: Path,
    config: Optional[Path],
    output_dir: Optional[Path],
    excel: Optional[bool],
    rows: int,
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile an internal ledger CSV with a provider statement CSV.

    INTERNAL_FILE: Path to the internal ledger export
    PROVIDER_FILE: Path to the provider statement export
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO)

    try:
        recon_config = load_config(config)
        if not verbose:
            _apply_logging_config(recon_config)

        session = ReconciliationSession(recon_config)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            for side, path in ((Source.INTERNAL, internal_file), (Source.PROVIDER, provider_file)):
                task = progress.add_task(f"Loading {side.label} CSV...", total=None)
                state = session.load_file(side, path)
                progress.update(task, completed=True)
                if not state.source(side).loaded:
                    console.print(f"[red]{escape(state.message)}[/red]")
                    sys.exit(1)

            task = progress.add_task("Reconciling data...", total=None)
            result = session.reconcile()
            progress.update(task, completed=True)

        if result is None:
            console.print(f"[yellow]{escape(session.state.message)}[/yellow]")
            sys.exit(1)

        console.print(f"[green]{escape(session.state.message)}[/green]")
        _display_summary(session.state.summary)
        _display_results(session, rows)

        if dry_run:
            console.print("\n[yellow]Dry run - no files written[/yellow]")
            return

        out_dir = output_dir or Path(recon_config.output.directory)
        for outcome in session.export_all(out_dir):
            colour = "green" if outcome.written else "yellow"
            console.print(f"[{colour}]{escape(outcome.message)}[/{colour}]")

        write_excel = recon_config.output.excel.enabled if excel is None else excel
        if write_excel:
            generator = ExcelReportGenerator(recon_config)
            report_path = generator.generate_report(
                summary=session.state.summary,
                result=result,
                output_path=out_dir / generator.default_filename(),
            )
            console.print(f"[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("--rows", type=int, default=20, show_default=True)
def inspect(csv_file: Path, config: Optional[Path], rows: int):
    """
    Parse a CSV file and display its records.

    CSV_FILE: Path to an internal or provider CSV export
    """
    try:
        recon_config = load_config(config)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    outcome = CsvRecordParser(recon_config).parse_file(csv_file)
    if not outcome.ok:
        console.print(f"[red]Error parsing {csv_file.name}: {escape(outcome.error)}[/red]")
        sys.exit(1)

    records = outcome.records
    fields = list(records[0].keys()) if records else []
    table = Table(title=f"Records: {csv_file.name}")
    for name in fields:
        table.add_column(name)
    for record in records[:rows]:
        table.add_row(*(_text(record.get(name)) for name in fields))
    console.print(table)

    if len(records) > rows:
        console.print(f"\n... and {len(records) - rows} more records")

    reference_field = recon_config.matching.reference_field
    missing = sum(1 for r in records if reference_field not in r)
    console.print(f"\nTotal records: {len(records)}")
    if missing:
        console.print(f"[yellow]Records without '{reference_field}': {missing}[/yellow]")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _apply_logging_config(config: ReconConfig) -> None:
    level = getattr(logging, config.logging.level.upper(), logging.INFO)
    setup_logging(level, log_format=config.logging.format)


def _display_summary(summary: Optional[ReconciliationSummary]) -> None:
    """Display reconciliation summary in console."""
    if summary is None:
        return

    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Internal Records", str(summary.total_internal_records))
    table.add_row("Total Provider Records", str(summary.total_provider_records))
    table.add_row("Matched", str(summary.matched_count))
    table.add_row("Fully Matched", str(summary.fully_matched_count))
    for name, count in summary.field_mismatch_counts.items():
        table.add_row(f"{name.capitalize()} Mismatches", str(count))
    table.add_row("Only in Internal", str(summary.only_internal_count))
    table.add_row("Only in Provider", str(summary.only_provider_count))
    table.add_row("Internal Match Rate", f"{summary.match_rate_internal:.1f}%")
    table.add_row("Provider Match Rate", f"{summary.match_rate_provider:.1f}%")
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)


def _display_results(session: ReconciliationSession, rows: int) -> None:
    """Display the matched and unmatched buckets."""
    results = session.state.results
    if results is None:
        return

    reference_field = session.config.matching.reference_field
    compared = list(session.config.matching.compared_fields)

    matched = Table(title="✅ Matched Transactions")
    matched.add_column("Reference")
    for name in compared:
        label = name.replace("_", " ").title()
        matched.add_column(f"Internal {label}")
        matched.add_column(f"Provider {label}")
        matched.add_column(f"{label} Match")
    for record in results.matched[:rows]:
        cells = [_text(record.get(reference_field))]
        for name in compared:
            flag = record.get(f"matched_{name}")
            style = "green" if flag else "red"
            cells += [
                _text(record.get(name)),
                _text(record.get(f"provider_{name}")),
                f"[{style}]{match_label(flag)}[/{style}]",
            ]
        matched.add_row(*cells)
    _print_bucket(matched, results.matched, rows, "No matched transactions found.")

    for title, records, empty in (
        ("⚠️ Only in Internal", results.only_internal, "No internal-only transactions found."),
        ("❌ Only in Provider", results.only_provider, "No provider-only transactions found."),
    ):
        table = Table(title=title)
        table.add_column("Reference")
        for name in compared:
            table.add_column(name.replace("_", " ").title())
        for record in records[:rows]:
            table.add_row(*(_text(record.get(name)) for name in [reference_field] + compared))
        _print_bucket(table, records, rows, empty)


def _print_bucket(table: Table, records: Sequence[Record], rows: int, empty: str) -> None:
    if not records:
        console.print(f"\n{table.title}: [dim]{empty}[/dim]")
        return
    console.print(table)
    if len(records) > rows:
        console.print(f"... and {len(records) - rows} more")


def _text(value) -> str:
    return "" if value is None else escape(str(value))


if __name__ == "__main__":
    main()
