from __future__ import annotations

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from award_intervals.domain.models import AggregationResult, IngestStats, IntervalRecord
from award_intervals.ingest.validator import PrecheckReport


def _interval_table(title: str, records: List[IntervalRecord]) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Producer", style="cyan", no_wrap=True)
    table.add_column("Interval", justify="right", style="bold green")
    table.add_column("Previous Win", justify="right", style="magenta")
    table.add_column("Following Win", justify="right", style="magenta")
    for record in records:
        table.add_row(
            record.producer,
            str(record.interval),
            str(record.previous_win),
            str(record.following_win),
        )
    return table


def print_intervals(result: AggregationResult, console: Optional[Console] = None) -> None:
    """
    Render the minimum and maximum interval tie sets as rich tables.
    """
    console = console or Console()

    if result.is_empty:
        console.print("[yellow]No producer has won more than once.[/yellow]")
        return

    console.print(_interval_table("Shortest Interval Between Wins", result.min))
    console.print(_interval_table("Longest Interval Between Wins", result.max))


def print_ingest_stats(stats: IngestStats, source: str, console: Optional[Console] = None) -> None:
    """Render ingest counters as a one-row table."""
    console = console or Console()
    table = Table(title=f"Ingest: {source}", box=box.ROUNDED)
    table.add_column("Total Rows", justify="right", style="magenta")
    table.add_column("Inserted", justify="right", style="bold green")
    table.add_column("Rejected", justify="right", style="red")
    table.add_row(f"{stats.total_rows:,}", f"{stats.inserted_rows:,}", f"{stats.rejected_rows:,}")
    console.print(table)


def print_precheck(report: PrecheckReport, source: str, console: Optional[Console] = None) -> None:
    console = console or Console()
    if report.valid:
        console.print(f"[green]{source}: {report.rows_checked:,} row(s) valid.[/green]")
        return
    rejection = report.first_rejection
    detail = f"line {rejection.line_number}: {rejection.reason}" if rejection else "unknown"
    console.print(f"[red]{source}: invalid at {detail}[/red]")
