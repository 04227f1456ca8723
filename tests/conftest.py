"""
Pytest configuration for the award interval engine.

Provides fixtures for:
- Settings override for tests
- Writing `;`-delimited award-list sources
- In-memory store and service instances
- Database connection management for PostgreSQL integration tests
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Generator, Iterable, Optional, Sequence

import psycopg
import pytest

from award_intervals.cache import ResultCache
from award_intervals.config import Settings
from award_intervals.infrastructure.db_factory import build_dsn, get_sync_connection
from award_intervals.ingest.validator import REQUIRED_COLUMNS
from award_intervals.service import AwardIntervalService
from award_intervals.storage.memory import InMemoryAwardStore

Row = Sequence[object]
SourceWriter = Callable[..., Path]


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "award_intervals"),
        log_level="DEBUG",
        store_backend="memory",
        ingest_timeout_seconds=None,
        cache_enabled=True,
        cache_ttl_seconds=None,
    )


@pytest.fixture
def write_source(tmp_path: Path) -> SourceWriter:
    """
    Factory writing an award list to a temp file and returning its path.

    Usage:
        path = write_source([(1980, "Title", "Studio", "Producer X", "yes")])
    """
    counter = {"n": 0}

    def _write(
        rows: Iterable[Row],
        header: Optional[Sequence[str]] = REQUIRED_COLUMNS,
        name: Optional[str] = None,
    ) -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"movielist-{counter['n']}.csv")
        lines = []
        if header is not None:
            lines.append(";".join(header))
        for row in rows:
            lines.append(";".join("" if cell is None else str(cell) for cell in row))
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def memory_store() -> InMemoryAwardStore:
    return InMemoryAwardStore()


@pytest.fixture
def service(test_settings: Settings, memory_store: InMemoryAwardStore) -> AwardIntervalService:
    return AwardIntervalService(
        store=memory_store,
        cache=ResultCache(enabled=True),
        settings=test_settings,
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = get_sync_connection(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_awards_table(db_connection: psycopg.Connection) -> Generator[None, None, None]:
    """
    Ensure the awards table exists and is empty around each test.
    """
    from award_intervals.storage.postgres import SCHEMA_SQL

    with db_connection.cursor() as cur:
        cur.execute(SCHEMA_SQL)
        cur.execute("TRUNCATE TABLE public.awards RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.awards RESTART IDENTITY;")
    db_connection.commit()
