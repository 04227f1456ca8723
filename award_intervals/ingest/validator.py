"""
Row and header validation for award-list sources.

Validation is pure: `validate_row` returns either an `AwardRecord` or a
`RowRejected` value and never raises for bad data. Only a broken header is
fatal (`SchemaMismatch`), because no row of such a source can be trusted.

Two year ceilings are in use:
- `INGEST_YEAR_MAX` (2100) when loading data into the store.
- the current calendar year for the ad-hoc `precheck_source` file check.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from award_intervals.domain.errors import SchemaMismatch
from award_intervals.domain.models import AwardRecord, RowRejected
from award_intervals.ingest.reader import SourceReader, open_source
from award_intervals.utils.logging import get_logger

log = get_logger(__name__)

REQUIRED_COLUMNS = ("year", "title", "studios", "producers", "winner")
INGEST_YEAR_MIN = 1900
INGEST_YEAR_MAX = 2100

_UNSAFE_CHARS = re.compile(r"[^\w\s.,'-]", re.ASCII)


def sanitize(value: object) -> str:
    """
    Drop characters outside letters, digits, whitespace and `.,'-`, then trim.

    Non-string input (e.g. a missing CSV cell) sanitizes to an empty string.
    """
    return _strip_unsafe(value).strip()


def _strip_unsafe(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return _UNSAFE_CHARS.sub("", value)


def current_year_bound() -> int:
    return date.today().year


def validate_header(columns: Optional[Iterable[str]]) -> None:
    """
    Ensure every required column is declared. Extra columns are allowed.

    Raises
    ------
    SchemaMismatch
        If one or more required columns are absent.
    """
    declared = {column.strip() for column in (columns or []) if column is not None}
    missing = [column for column in REQUIRED_COLUMNS if column not in declared]
    if missing:
        log.error(
            "Source header is incomplete",
            extra={"missing_columns": missing, "declared_columns": sorted(declared)},
        )
        raise SchemaMismatch(missing)


def _parse_year(raw: object) -> Optional[int]:
    if not isinstance(raw, str):
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def validate_row(
    row: Mapping[str, Optional[str]],
    year_upper_bound: int = INGEST_YEAR_MAX,
    line_number: int = 0,
    year_lower_bound: int = INGEST_YEAR_MIN,
) -> Union[AwardRecord, RowRejected]:
    """
    Check one raw row and build the typed record.

    Parameters
    ----------
    row : Mapping[str, Optional[str]]
        Raw string cells keyed by column name.
    year_upper_bound : int
        Inclusive ceiling for `year`.
    line_number : int
        Source line of the row, carried into the rejection for logging.
    year_lower_bound : int
        Inclusive floor for `year`; never below 1900.

    `winner` is compared as an exact token: unsafe characters are dropped but
    surrounding whitespace is kept, so " yes" is not a winner.
    """
    year = _parse_year(row.get("year"))
    if year is None:
        return RowRejected(line_number=line_number, reason="year is not an integer", row=dict(row))
    year_lower_bound = max(year_lower_bound, INGEST_YEAR_MIN)
    if not year_lower_bound <= year <= year_upper_bound:
        return RowRejected(
            line_number=line_number,
            reason=f"year {year} outside [{year_lower_bound}, {year_upper_bound}]",
            row=dict(row),
        )

    fields = {name: sanitize(row.get(name)) for name in ("title", "studios", "producers")}
    empty = [name for name, value in fields.items() if not value]
    if empty:
        return RowRejected(
            line_number=line_number,
            reason="empty required field(s): " + ", ".join(empty),
            row=dict(row),
        )

    winner = _strip_unsafe(row.get("winner"))
    try:
        return AwardRecord(year=year, winner=winner if winner.strip() else None, **fields)
    except ValidationError as exc:
        return RowRejected(line_number=line_number, reason=str(exc), row=dict(row))


@dataclass(frozen=True)
class PrecheckReport:
    """Outcome of `precheck_source`."""

    valid: bool
    rows_checked: int
    first_rejection: Optional[RowRejected] = None


def precheck_source(path: Union[str, Path], year_upper_bound: Optional[int] = None) -> PrecheckReport:
    """
    Check a file before accepting it for upload.

    Stops at the first invalid row. Years are bounded by the current calendar
    year unless `year_upper_bound` is given.

    Raises
    ------
    SourceNotFound
        If the file cannot be opened.
    SchemaMismatch
        If the header lacks a required column.
    """
    bound = year_upper_bound if year_upper_bound is not None else current_year_bound()
    rows_checked = 0
    with open_source(path) as handle:
        reader = SourceReader(handle)
        validate_header(reader.columns)
        for line_number, row in reader:
            rows_checked += 1
            outcome = validate_row(row, bound, line_number)
            if isinstance(outcome, RowRejected):
                log.warning(
                    f"Precheck rejected line {line_number}: {outcome.reason}",
                    extra={"source": str(path), "line": line_number},
                )
                return PrecheckReport(valid=False, rows_checked=rows_checked, first_rejection=outcome)

    log.info("Precheck passed", extra={"source": str(path), "rows": rows_checked})
    return PrecheckReport(valid=True, rows_checked=rows_checked)


__all__ = [
    "INGEST_YEAR_MAX",
    "INGEST_YEAR_MIN",
    "REQUIRED_COLUMNS",
    "PrecheckReport",
    "current_year_bound",
    "precheck_source",
    "sanitize",
    "validate_header",
    "validate_row",
]
