"""
Synthetic award-list generator.

Writes deterministic pseudo-random `year;title;studios;producers;winner`
files, useful for exercising batch flushing on large sources, and can load
the result straight into the configured store.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from pathlib import Path

import typer

from award_intervals.ingest.reader import DELIMITER
from award_intervals.ingest.validator import REQUIRED_COLUMNS

app = typer.Typer(help="Generate synthetic award lists (and optionally load them).")

_FIRST = ["Allan", "Bo", "Cara", "Dino", "Edith", "Frank", "Gia", "Hal", "Iris", "Jules"]
_LAST = ["Carr", "Derek", "Lane", "Moss", "Nolan", "Price", "Quinn", "Reyes", "Stone", "Vance"]
_STUDIOS = ["Associated Film", "Columbia Pictures", "Paramount", "Universal", "Warner Bros."]
_WORDS = ["Night", "Return", "Storm", "Fever", "Empire", "Shadow", "Circus", "Island", "Code"]


def _producers_field(rng: random.Random) -> str:
    names = [f"{rng.choice(_FIRST)} {rng.choice(_LAST)}" for _ in range(rng.randint(1, 3))]
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " and " + names[-1]


def _generate_rows_csv(
    csv_path: Path,
    rows: int,
    batch_size: int,
    seed: int,
    winner_ratio: float = 0.2,
    first_year: int = 1980,
    last_year: int = 2020,
) -> None:
    rng = random.Random(seed)

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, delimiter=DELIMITER)
        writer.writerow(REQUIRED_COLUMNS)

        buffer: list[list[str]] = []
        for _ in range(rows):
            buffer.append(
                [
                    str(rng.randint(first_year, last_year)),
                    f"The {rng.choice(_WORDS)} {rng.choice(_WORDS)}",
                    rng.choice(_STUDIOS),
                    _producers_field(rng),
                    "yes" if rng.random() < winner_ratio else "",
                ]
            )
            if len(buffer) >= batch_size:
                writer.writerows(buffer)
                buffer.clear()
        if buffer:
            writer.writerows(buffer)


@app.command()
def main(
    rows: int = typer.Option(
        10_000,
        "--rows",
        "-r",
        help="Number of rows to generate.",
    ),
    batch_size: int = typer.Option(
        1_000,
        "--batch-size",
        "-b",
        help="Batch size for CSV buffering during generation.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    winner_ratio: float = typer.Option(
        0.2,
        "--winner-ratio",
        help="Share of rows flagged as winners.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional output path (if omitted, a temp file will be used).",
    ),
    load: bool = typer.Option(
        False,
        "--load",
        help="Ingest the generated file into the configured store.",
    ),
) -> None:
    """
    Generate a synthetic award list and optionally ingest it.
    """
    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="award_list_"))
        csv_path = tmpdir / "movielist.csv"

    typer.echo(f"Generating {rows:,} rows -> {csv_path} (seed={seed}, winners~{winner_ratio:.0%})")
    _generate_rows_csv(csv_path, rows=rows, batch_size=batch_size, seed=seed, winner_ratio=winner_ratio)
    gen_duration = time.perf_counter() - start
    typer.echo(f"Generation completed in {gen_duration:.2f}s")

    if not load:
        return

    from award_intervals.service import AwardIntervalService

    service = AwardIntervalService()
    try:
        stats = service.upload(csv_path)
    finally:
        service.close()
    typer.echo(
        f"Loaded {stats.inserted_rows:,}/{stats.total_rows:,} rows "
        f"({stats.rejected_rows:,} rejected) in {time.perf_counter() - start:.2f}s total."
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
