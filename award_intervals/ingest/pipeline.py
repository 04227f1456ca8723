"""
Bulk ingest pipeline: source -> validation -> batches -> store replace.

The pipeline is a chain of lazy stages:

1. `SourceReader` yields raw rows one at a time.
2. `_accepted_records` validates each row, counts it, logs rejections and
   yields only accepted `AwardRecord`s.
3. `batched` groups accepted records into lists of `batch_size`.
4. Each batch is written into a single store replace transaction, which
   commits once the source is exhausted.

Memory use is bounded by one batch regardless of source size. The header is
checked before the transaction opens, so a schema mismatch leaves the store
untouched. Any failure after that rolls the whole replace back: either every
accepted row is installed or none is.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterator, Optional

from award_intervals.config import get_settings
from award_intervals.domain.errors import IngestTimeout, StorageFailure
from award_intervals.domain.models import AwardRecord, IngestStats, RowRejected
from award_intervals.ingest.reader import Source, SourceReader, open_source
from award_intervals.ingest.validator import validate_header, validate_row
from award_intervals.storage.abstract import AwardStore, batched
from award_intervals.utils.logging import get_logger
from award_intervals.utils.profiler import profile_block

log = get_logger(__name__)


@dataclass
class _Counters:
    total: int = 0
    rejected: int = 0


class IngestPipeline:
    """
    Load a `;`-delimited award list into a store, replacing its content.

    Parameters
    ----------
    store : AwardStore
        Destination store.
    batch_size : int, optional
        Records per flushed batch. Defaults to settings (1000).
    year_upper_bound : int, optional
        Inclusive year ceiling. Defaults to settings (2100).
    year_lower_bound : int, optional
        Inclusive year floor. Defaults to settings (1900).
    timeout_seconds : float, optional
        Abort and roll back when streaming takes longer than this.
    """

    def __init__(
        self,
        store: AwardStore,
        batch_size: Optional[int] = None,
        year_upper_bound: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        year_lower_bound: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.store = store
        self.batch_size = batch_size or settings.ingest_batch_size
        self.year_upper_bound = year_upper_bound or settings.ingest_year_max
        self.year_lower_bound = year_lower_bound or settings.ingest_year_min
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.ingest_timeout_seconds
        )

    def _accepted_records(
        self, reader: SourceReader, counters: _Counters, deadline: Optional[float]
    ) -> Iterator[AwardRecord]:
        for line_number, row in reader:
            if deadline is not None and time.monotonic() > deadline:
                raise IngestTimeout(self.timeout_seconds)
            counters.total += 1
            outcome = validate_row(row, self.year_upper_bound, line_number, self.year_lower_bound)
            if isinstance(outcome, RowRejected):
                counters.rejected += 1
                log.warning(
                    f"Rejected line {line_number}: {outcome.reason}",
                    extra={"line": line_number, "row": dict(outcome.row)},
                )
                continue
            yield outcome

    def ingest(self, source: Source) -> IngestStats:
        """
        Stream `source` into the store.

        Returns
        -------
        IngestStats
            Rows read, rows installed and rows rejected.

        Raises
        ------
        SourceNotFound
            If a path source cannot be opened.
        SchemaMismatch
            If the header lacks a required column; nothing is committed.
        MalformedSource
            If the source cannot be decoded or parsed; the replace is rolled back.
        CommitFailure
            If writing or committing fails (IngestTimeout on deadline); rolled back.
        StorageFailure
            If the store cannot start a replace.
        """
        counters = _Counters()
        source_name = str(getattr(source, "name", source))
        log.info(
            f"[INGEST START] {source_name}",
            extra={"source": source_name, "batch_size": self.batch_size, "store": self.store.name},
        )

        with profile_block("ingest") as profile:
            with open_source(source) as handle:
                reader = SourceReader(handle)
                validate_header(reader.columns)
                deadline = (
                    time.monotonic() + self.timeout_seconds if self.timeout_seconds else None
                )
                try:
                    with self.store.begin_replace() as tx:
                        records = self._accepted_records(reader, counters, deadline)
                        for number, batch in enumerate(batched(records, self.batch_size), 1):
                            tx.write_batch(batch)
                            log.debug(
                                f"Batch {number} staged",
                                extra={"batch": number, "rows": len(batch), "staged": tx.written},
                            )
                except StorageFailure:
                    log.exception(
                        f"[INGEST FAILED] {source_name}; store left unchanged",
                        extra={"source": source_name, "rows_read": counters.total},
                    )
                    raise

        stats = IngestStats(
            total_rows=counters.total,
            inserted_rows=tx.written,
            rejected_rows=counters.rejected,
        )
        log.info(
            f"[INGEST COMPLETE] {source_name}",
            extra={"source": source_name, **stats.model_dump(), **profile.as_log_extra()},
        )
        if stats.rejected_rows:
            log.warning(
                f"{stats.rejected_rows} row(s) rejected",
                extra={"rejected_rows": stats.rejected_rows},
            )
        return stats


__all__ = ["IngestPipeline"]
