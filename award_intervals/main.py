from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer

from award_intervals.config import get_settings
from award_intervals.domain.errors import AwardIntervalsError, SchemaMismatch, SourceNotFound
from award_intervals.ingest.validator import precheck_source
from award_intervals.reporter import print_ingest_stats, print_intervals, print_precheck
from award_intervals.service import AwardIntervalService
from award_intervals.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Producer award interval engine CLI.")
log = get_logger(__name__)

EXIT_FAILURE = 1
EXIT_NOT_FOUND = 2


def _service() -> AwardIntervalService:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return AwardIntervalService(settings=settings)


def _fail(exc: AwardIntervalsError) -> typer.Exit:
    kind = "Rejected input" if isinstance(exc, (SchemaMismatch, SourceNotFound)) else "Error"
    typer.echo(f"{kind}: {exc}", err=True)
    return typer.Exit(code=EXIT_FAILURE)


def _remove_source(path: Path) -> None:
    try:
        path.unlink()
        log.info(f"Source file {path} removed", extra={"source": str(path)})
    except FileNotFoundError:
        log.warning(f"Source file already gone: {path}", extra={"source": str(path)})
    except OSError:
        log.exception(f"Could not remove source file {path}", extra={"source": str(path)})


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    store = settings.store_backend
    if store == "postgres":
        store = f"postgres {settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    typer.echo(
        f"store={store} | batch={settings.ingest_batch_size} "
        f"years=[{settings.ingest_year_min}, {settings.ingest_year_max}] | "
        f"cache={'on' if settings.cache_enabled else 'off'} ttl={settings.cache_ttl_seconds} | "
        f"data_file={settings.data_file}"
    )


@app.command()
def load(
    source: Path = typer.Argument(..., help="Path to a ';'-delimited award list."),
    remove_source: bool = typer.Option(
        False,
        "--remove-source",
        help="Delete the source file once loading finishes or fails.",
    ),
    show_intervals: bool = typer.Option(
        False,
        "--intervals",
        "-i",
        help="Print the producer intervals after loading.",
    ),
) -> None:
    """
    Replace the stored award records with the rows of SOURCE.
    """
    service = _service()
    try:
        stats = service.upload(source)
        print_ingest_stats(stats, str(source))
        if show_intervals:
            print_intervals(service.producer_intervals())
    except AwardIntervalsError as exc:
        raise _fail(exc) from exc
    finally:
        if remove_source:
            _remove_source(source)
        service.close()


@app.command()
def intervals(
    source: Optional[Path] = typer.Option(
        None,
        "--source",
        "-s",
        help="Load this file first (default: DATA_FILE for the in-memory store).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """
    Show producers with the shortest and longest gaps between consecutive wins.
    """
    service = _service()
    try:
        if source is not None:
            service.upload(source)
        elif service.settings.store_backend == "memory":
            service.bootstrap()
        result = service.producer_intervals()
    except AwardIntervalsError as exc:
        raise _fail(exc) from exc
    finally:
        service.close()

    if as_json:
        typer.echo(json.dumps(result.to_payload(), indent=2))
    else:
        print_intervals(result)
    if result.is_empty:
        typer.echo("Not found: no producer has won more than once.", err=True)
        raise typer.Exit(code=EXIT_NOT_FOUND)


@app.command()
def precheck(
    source: Path = typer.Argument(..., help="Path to a ';'-delimited award list."),
) -> None:
    """
    Validate SOURCE (years capped at the current year) without loading it.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        report = precheck_source(source)
    except AwardIntervalsError as exc:
        raise _fail(exc) from exc
    print_precheck(report, str(source))
    if not report.valid:
        raise typer.Exit(code=EXIT_FAILURE)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
