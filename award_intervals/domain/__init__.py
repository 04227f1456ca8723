"""
Domain package for the award interval engine.

Exports the core domain models and the error taxonomy shared by ingestion,
storage and aggregation. Keep this package focused on data definitions.
"""

from award_intervals.domain.errors import (
    AwardIntervalsError,
    CommitFailure,
    IngestTimeout,
    MalformedSource,
    SchemaMismatch,
    SourceNotFound,
    StorageFailure,
)
from award_intervals.domain.models import (
    WINNER_TOKEN,
    AggregationResult,
    AwardRecord,
    IngestStats,
    IntervalRecord,
    RowRejected,
    WinnerRow,
)

__all__ = [
    "WINNER_TOKEN",
    "AggregationResult",
    "AwardIntervalsError",
    "AwardRecord",
    "CommitFailure",
    "IngestStats",
    "IngestTimeout",
    "IntervalRecord",
    "MalformedSource",
    "RowRejected",
    "SchemaMismatch",
    "SourceNotFound",
    "StorageFailure",
    "WinnerRow",
]
