"""
Ingest package: streaming reader, row validation and the bulk pipeline.
"""

from award_intervals.ingest.pipeline import IngestPipeline
from award_intervals.ingest.reader import SourceReader, open_source
from award_intervals.ingest.validator import (
    REQUIRED_COLUMNS,
    PrecheckReport,
    precheck_source,
    sanitize,
    validate_header,
    validate_row,
)

__all__ = [
    "REQUIRED_COLUMNS",
    "IngestPipeline",
    "PrecheckReport",
    "SourceReader",
    "open_source",
    "precheck_source",
    "sanitize",
    "validate_header",
    "validate_row",
]
