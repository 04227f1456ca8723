"""
Error taxonomy for ingestion and storage.

Every fatal condition surfaces as a subclass of `AwardIntervalsError` so the
calling layer can pick an outward status from the exception type alone.
Rejected rows are not errors: see `RowRejected` in `award_intervals.domain.models`.
"""

from __future__ import annotations

from typing import Iterable, Tuple


class AwardIntervalsError(Exception):
    """Base class for all fatal engine errors."""


class SchemaMismatch(AwardIntervalsError):
    """
    The source header lacks one or more required columns.

    Raised before any row is read; nothing is committed.
    """

    def __init__(self, missing_columns: Iterable[str]) -> None:
        self.missing_columns: Tuple[str, ...] = tuple(missing_columns)
        super().__init__(
            "Source header is missing required column(s): " + ", ".join(self.missing_columns)
        )


class SourceNotFound(AwardIntervalsError):
    """The input source could not be opened."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Source not found or unreadable: {path}")


class MalformedSource(AwardIntervalsError):
    """The source could not be decoded or parsed as delimited text mid-stream."""

    def __init__(self, path: str, line_number: int, detail: str) -> None:
        self.path = path
        self.line_number = line_number
        super().__init__(f"Malformed source {path} near line {line_number}: {detail}")


class StorageFailure(AwardIntervalsError):
    """The storage layer failed; prior store content is left intact."""


class CommitFailure(StorageFailure):
    """A replace transaction could not be applied and was rolled back."""


class IngestTimeout(CommitFailure):
    """Streaming exceeded the configured deadline; the replace was rolled back."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Ingest exceeded timeout of {timeout_seconds:g}s and was rolled back")


__all__ = [
    "AwardIntervalsError",
    "CommitFailure",
    "IngestTimeout",
    "MalformedSource",
    "SchemaMismatch",
    "SourceNotFound",
    "StorageFailure",
]
