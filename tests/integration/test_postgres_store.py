"""
Integration tests for the PostgreSQL award store.

These tests run against a real PostgreSQL instance and verify that:
1. A replace installs every staged row in one commit
2. A failed replace leaves the previous rows in place
3. Winners come back ordered by producers, then year
4. The ingest pipeline and service produce the same intervals as in memory
5. Overlapping replaces leave exactly one source in the table

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from typing import Generator, List

import pytest

from award_intervals.cache import ResultCache
from award_intervals.domain.errors import CommitFailure, SchemaMismatch
from award_intervals.domain.models import AwardRecord, WinnerRow
from award_intervals.service import AwardIntervalService
from award_intervals.storage.memory import InMemoryAwardStore
from award_intervals.storage.postgres import PostgresAwardStore

DATA_FILE = Path(__file__).resolve().parents[2] / "data" / "movielist.csv"

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


def _record(year: int, producers: str, winner: bool = True) -> AwardRecord:
    return AwardRecord(
        year=year,
        title=f"Film {year}",
        studios="Studio",
        producers=producers,
        winner="yes" if winner else None,
    )


@pytest.fixture
def pg_store(test_dsn: str, clean_awards_table: None) -> Generator[PostgresAwardStore, None, None]:
    store = PostgresAwardStore(dsn_override=test_dsn)
    store.ensure_schema()
    try:
        yield store
    finally:
        store.close()


class TestReplace:
    """Replace semantics against a real table."""

    def test_replace_installs_all_rows(self, pg_store: PostgresAwardStore):
        installed = pg_store.replace_all(
            [_record(1990 + i, "Producer X", winner=i % 2 == 0) for i in range(25)],
            batch_size=10,
        )

        assert installed == 25
        assert pg_store.count() == 25
        assert len(pg_store.winners()) == 13

    def test_replace_discards_previous_rows(self, pg_store: PostgresAwardStore):
        pg_store.replace_all([_record(1980, "Old")])
        pg_store.replace_all([_record(2000, "New"), _record(2001, "New")])

        assert [row.producers for row in pg_store.winners()] == ["New", "New"]

    def test_failed_replace_rolls_back(self, pg_store: PostgresAwardStore):
        pg_store.replace_all([_record(1980, "Old"), _record(1990, "Old")])
        notified = []
        pg_store.add_replace_listener(lambda: notified.append(True))

        with pytest.raises(CommitFailure):
            with pg_store.begin_replace() as tx:
                tx.write_batch([_record(2000, "New")])
                raise CommitFailure("simulated write failure")

        assert pg_store.count() == 2
        assert [row.producers for row in pg_store.winners()] == ["Old", "Old"]
        assert notified == []

    def test_overlapping_replaces_install_one_source(self, pg_store: PostgresAwardStore):
        first = [_record(1950 + i, "First") for i in range(30)]
        second = [_record(2000 + i, "Second") for i in range(7)]
        first_staged = threading.Event()
        errors: List[Exception] = []

        def slow_replace() -> None:
            try:
                with pg_store.begin_replace() as tx:
                    tx.write_batch(first)
                    first_staged.set()
                    time.sleep(0.5)
            except Exception as exc:
                errors.append(exc)
                first_staged.set()

        def fast_replace() -> None:
            first_staged.wait(timeout=5)
            try:
                pg_store.replace_all(second)
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=slow_replace), threading.Thread(target=fast_replace)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        assert pg_store.count() == len(second)
        assert {row.producers for row in pg_store.winners()} == {"Second"}


class TestWinners:
    """Winner ordering matches the in-memory store."""

    def test_winners_ordered_like_memory_store(self, pg_store: PostgresAwardStore):
        records = [
            _record(1990, "alpha"),
            _record(1984, "Bo Derek"),
            _record(1980, "Zulu"),
            _record(1990, "Bo Derek"),
            _record(1981, "Alpha"),
            _record(1985, "Alpha", winner=False),
        ]
        memory = InMemoryAwardStore()
        memory.replace_all(records)
        pg_store.replace_all(records)

        assert pg_store.winners() == memory.winners()
        assert pg_store.winners()[0] == WinnerRow(producers="Alpha", year=1981)


class TestService:
    """End-to-end ingest and query through the PostgreSQL backend."""

    def test_bundled_file_intervals(self, pg_store: PostgresAwardStore, test_settings):
        service = AwardIntervalService(store=pg_store, cache=ResultCache(), settings=test_settings)

        stats = service.upload(DATA_FILE)
        result = service.producer_intervals()

        assert stats.inserted_rows == pg_store.count()
        assert [(r.producer, r.interval) for r in result.min] == [("Joel Silver", 1)]
        assert [(r.producer, r.interval) for r in result.max] == [("Matthew Vaughn", 13)]

    def test_schema_mismatch_keeps_rows(self, pg_store: PostgresAwardStore, test_settings, write_source):
        service = AwardIntervalService(store=pg_store, cache=ResultCache(), settings=test_settings)
        service.upload(DATA_FILE)
        before = pg_store.count()

        with pytest.raises(SchemaMismatch):
            service.upload(write_source([(1990, "C", "S", "yes")], header=["year", "title", "studios", "winner"]))

        assert pg_store.count() == before
