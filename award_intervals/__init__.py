"""
Award Intervals - producer win-interval engine for award-list data.

This package ingests `;`-delimited award lists (year, title, studios,
producers, winner) and answers one question: which producers have the
shortest and the longest gap between consecutive wins. It provides:

- Row validation and streaming, batched bulk ingestion
- Interchangeable stores (in-memory snapshot, PostgreSQL)
- Deterministic interval aggregation with tie sets
- A generation-checked result cache invalidated on every replace
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from award_intervals.aggregation import aggregate, build_win_histories, split_producers
from award_intervals.cache import ResultCache
from award_intervals.config import Settings, get_settings
from award_intervals.domain import (
    AggregationResult,
    AwardIntervalsError,
    AwardRecord,
    CommitFailure,
    IngestStats,
    IngestTimeout,
    IntervalRecord,
    MalformedSource,
    RowRejected,
    SchemaMismatch,
    SourceNotFound,
    StorageFailure,
    WinnerRow,
)
from award_intervals.ingest import IngestPipeline, precheck_source, sanitize, validate_header, validate_row
from award_intervals.service import AwardIntervalService
from award_intervals.storage import AwardStore, InMemoryAwardStore, build_store
from award_intervals.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Entry points
    "AwardIntervalService",
    "IngestPipeline",
    "precheck_source",
    # Validation and aggregation
    "sanitize",
    "validate_header",
    "validate_row",
    "aggregate",
    "build_win_histories",
    "split_producers",
    # Storage and cache
    "AwardStore",
    "InMemoryAwardStore",
    "build_store",
    "ResultCache",
    # Domain
    "AggregationResult",
    "AwardRecord",
    "IngestStats",
    "IntervalRecord",
    "RowRejected",
    "WinnerRow",
    # Errors
    "AwardIntervalsError",
    "CommitFailure",
    "IngestTimeout",
    "MalformedSource",
    "SchemaMismatch",
    "SourceNotFound",
    "StorageFailure",
    # Logging
    "configure_logging",
    "get_logger",
]
