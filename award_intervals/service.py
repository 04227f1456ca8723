"""
Entry points used by the surrounding application (CLI, web handlers).

`AwardIntervalService` owns one store and its result cache. The cache is
registered as a replace listener on the store, so every committed ingest
invalidates it before `upload` returns.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from award_intervals.aggregation.intervals import aggregate
from award_intervals.cache import ResultCache
from award_intervals.config import Settings, get_settings
from award_intervals.domain.errors import SourceNotFound
from award_intervals.domain.models import AggregationResult, IngestStats
from award_intervals.ingest.pipeline import IngestPipeline
from award_intervals.ingest.reader import Source
from award_intervals.ingest.validator import PrecheckReport, precheck_source
from award_intervals.storage import AwardStore, build_store
from award_intervals.utils.logging import get_logger

log = get_logger(__name__)


class AwardIntervalService:
    """
    Ingest and query facade over a store, a pipeline and a result cache.

    Parameters
    ----------
    store : AwardStore, optional
        Defaults to the backend selected by `settings.store_backend`.
    cache : ResultCache, optional
        Defaults to a cache configured from settings.
    settings : Settings, optional
        Defaults to `get_settings()`.
    """

    def __init__(
        self,
        store: Optional[AwardStore] = None,
        cache: Optional[ResultCache] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store or build_store(self.settings)
        self.cache = cache or ResultCache(
            enabled=self.settings.cache_enabled,
            ttl_seconds=self.settings.cache_ttl_seconds,
        )
        self.store.add_replace_listener(self.cache.invalidate)
        self.pipeline = IngestPipeline(
            self.store,
            batch_size=self.settings.ingest_batch_size,
            year_upper_bound=self.settings.ingest_year_max,
            timeout_seconds=self.settings.ingest_timeout_seconds,
            year_lower_bound=self.settings.ingest_year_min,
        )

    def upload(self, source: Source) -> IngestStats:
        """
        Replace the store content with the rows of `source`.

        The caller keeps ownership of the source file; it is never deleted here.
        """
        return self.pipeline.ingest(source)

    def producer_intervals(self) -> AggregationResult:
        """
        Producers with the shortest and longest gaps between consecutive wins.

        An empty result means no producer has won twice; callers map it to
        "not found".
        """
        cached = self.cache.get()
        if cached is not None:
            log.info("Award intervals served from cache")
            return cached

        generation = self.cache.generation
        winners = self.store.winners()
        log.info("Winners loaded from store", extra={"store": self.store.name, "rows": len(winners)})
        result = aggregate(winners)
        self.cache.set(result, generation)
        return result

    def precheck(self, path: Union[str, Path]) -> PrecheckReport:
        """Validate a file against the current-year ceiling without loading it."""
        return precheck_source(path)

    def bootstrap(self, path: Optional[Union[str, Path]] = None) -> Optional[IngestStats]:
        """
        Load the start-up data file, if present.

        A missing file leaves the store empty and is only logged.
        """
        data_file = path or self.settings.data_file
        try:
            stats = self.upload(data_file)
        except SourceNotFound:
            log.warning(f"Start-up data file not found: {data_file}", extra={"source": str(data_file)})
            return None
        log.info(f"Start-up data loaded from {data_file}", extra=stats.model_dump())
        return stats

    def close(self) -> None:
        self.store.close()


__all__ = ["AwardIntervalService"]
