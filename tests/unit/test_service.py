from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from award_intervals.cache import ResultCache
from award_intervals.domain.errors import SchemaMismatch, SourceNotFound
from award_intervals.domain.models import WinnerRow
from award_intervals.service import AwardIntervalService
from award_intervals.storage.memory import InMemoryAwardStore

DATA_FILE = Path(__file__).resolve().parents[2] / "data" / "movielist.csv"


class _CountingStore(InMemoryAwardStore):
    def __init__(self) -> None:
        super().__init__()
        self.winner_reads = 0

    def winners(self) -> List[WinnerRow]:
        self.winner_reads += 1
        return super().winners()


def test_upload_then_query(service, write_source) -> None:
    path = write_source([(1980, "A", "S", "Producer X", "yes"), (1985, "B", "S", "Producer X", "yes")])

    stats = service.upload(path)
    result = service.producer_intervals()

    assert stats.inserted_rows == 2
    assert result.to_payload() == {
        "min": [{"producer": "Producer X", "interval": 5, "previousWin": 1980, "followingWin": 1985}],
        "max": [{"producer": "Producer X", "interval": 5, "previousWin": 1980, "followingWin": 1985}],
    }
    assert path.exists()


def test_cached_result_skips_store(test_settings, write_source) -> None:
    store = _CountingStore()
    service = AwardIntervalService(store=store, cache=ResultCache(), settings=test_settings)
    service.upload(write_source([(1980, "A", "S", "P", "yes"), (1990, "B", "S", "P", "yes")]))

    first = service.producer_intervals()
    second = service.producer_intervals()

    assert first == second
    assert store.winner_reads == 1


def test_upload_invalidates_cache(service, write_source) -> None:
    service.upload(write_source([(1980, "A", "S", "Producer X", "yes"), (1985, "B", "S", "Producer X", "yes")]))
    assert service.producer_intervals().min[0].interval == 5

    service.upload(write_source([(1980, "A", "S", "Producer Y", "yes"), (1982, "B", "S", "Producer Y", "yes")]))
    result = service.producer_intervals()

    assert [record.producer for record in result.min] == ["Producer Y"]
    assert result.min[0].interval == 2


def test_rejected_upload_keeps_previous_answer(service, write_source) -> None:
    service.upload(write_source([(1980, "A", "S", "Producer X", "yes"), (1985, "B", "S", "Producer X", "yes")]))
    before = service.producer_intervals()

    with pytest.raises(SchemaMismatch):
        service.upload(write_source([(1990, "C", "S", "yes")], header=["year", "title", "studios", "winner"]))

    assert service.producer_intervals() == before


def test_empty_store_gives_empty_result(service) -> None:
    assert service.producer_intervals().is_empty


def test_upload_missing_file(service, tmp_path) -> None:
    with pytest.raises(SourceNotFound):
        service.upload(tmp_path / "absent.csv")


def test_bootstrap_missing_file_leaves_store_empty(service, tmp_path) -> None:
    assert service.bootstrap(tmp_path / "absent.csv") is None
    assert service.store.count() == 0
    assert service.producer_intervals().is_empty


def test_bootstrap_bundled_data_file(service) -> None:
    stats = service.bootstrap(DATA_FILE)
    result = service.producer_intervals()

    assert stats is not None
    assert stats.rejected_rows == 0
    assert [(r.producer, r.interval, r.previous_win, r.following_win) for r in result.min] == [
        ("Joel Silver", 1, 1990, 1991)
    ]
    assert [(r.producer, r.interval, r.previous_win, r.following_win) for r in result.max] == [
        ("Matthew Vaughn", 13, 2002, 2015)
    ]


def test_disabled_cache_gives_same_answer(test_settings, memory_store) -> None:
    uncached = AwardIntervalService(
        store=memory_store, cache=ResultCache(enabled=False), settings=test_settings
    )
    uncached.bootstrap(DATA_FILE)

    first = uncached.producer_intervals()
    second = uncached.producer_intervals()

    assert first == second
    assert first.min[0].producer == "Joel Silver"


def test_precheck_delegates_to_validator(service, write_source) -> None:
    report = service.precheck(write_source([(1980, "A", "S", "P", "yes")]))

    assert report.valid
    assert report.rows_checked == 1


def test_configured_year_floor_rejects_older_rows(test_settings, memory_store, write_source) -> None:
    settings = test_settings.model_copy(update={"ingest_year_min": 1950})
    service = AwardIntervalService(store=memory_store, cache=ResultCache(), settings=settings)

    stats = service.upload(write_source([(1920, "A", "S", "P", "yes")]))

    assert (stats.total_rows, stats.inserted_rows, stats.rejected_rows) == (1, 0, 1)
    assert memory_store.count() == 0
