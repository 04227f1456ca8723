"""
PostgreSQL award store.

A replace runs as one database transaction: `DELETE` of the old rows followed
by batched inserts and a single `COMMIT`. `DELETE` (rather than `TRUNCATE`)
keeps concurrent readers on the previous MVCC snapshot instead of blocking
them for the length of the ingest. Concurrent replaces (threads or separate
processes) are serialized by a transaction-scoped advisory lock taken before
the `DELETE`; a second replace waits until the first commits or rolls back,
so the table always holds exactly one source.

Winners are ordered with the "C" collation so the ordering matches Python's
code-point string comparison used by the in-memory store.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool, PoolTimeout

from award_intervals.config import get_settings
from award_intervals.domain.errors import CommitFailure, StorageFailure
from award_intervals.domain.models import WINNER_TOKEN, AwardRecord, WinnerRow
from award_intervals.infrastructure.db_factory import connect_retry, get_sync_pool
from award_intervals.storage.abstract import AwardStore, ReplaceTransaction
from award_intervals.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS public.awards (
    id BIGSERIAL PRIMARY KEY,
    year INTEGER NOT NULL CHECK (year BETWEEN 1900 AND 2100),
    title TEXT NOT NULL,
    studios TEXT NOT NULL,
    producers TEXT NOT NULL,
    winner TEXT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS awards_winner_idx ON public.awards (winner);
"""

INSERT_SQL = (
    "INSERT INTO public.awards (year, title, studios, producers, winner) "
    "VALUES (%s, %s, %s, %s, %s);"
)
WINNERS_SQL = (
    "SELECT producers, year FROM public.awards WHERE winner = %s "
    'ORDER BY producers COLLATE "C", year, id;'
)
# Transaction-scoped advisory lock serializing replaces across connections and processes.
REPLACE_LOCK_KEY = 0x61776172
REPLACE_LOCK_SQL = "SELECT pg_advisory_xact_lock(%s);"


class _PostgresReplace(ReplaceTransaction):
    def __init__(self, pool: ConnectionPool, conn: Connection) -> None:
        super().__init__()
        self._pool = pool
        self._conn = conn
        self._released = False

    def begin(self) -> None:
        try:
            with self._conn.cursor() as cur:
                cur.execute(REPLACE_LOCK_SQL, (REPLACE_LOCK_KEY,))
                cur.execute("DELETE FROM public.awards;")
        except psycopg.Error as exc:
            raise CommitFailure(f"Failed to clear awards table: {exc}") from exc

    def write_batch(self, records: Sequence[AwardRecord]) -> None:
        params = [(r.year, r.title, r.studios, r.producers, r.winner) for r in records]
        try:
            with self._conn.cursor() as cur:
                cur.executemany(INSERT_SQL, params)
        except psycopg.Error as exc:
            raise CommitFailure(f"Failed to write batch of {len(params)} rows: {exc}") from exc
        self.written += len(params)

    def commit(self) -> None:
        try:
            self._conn.commit()
        except psycopg.Error as exc:
            raise CommitFailure(f"Commit failed: {exc}") from exc
        finally:
            self._release()

    def rollback(self) -> None:
        try:
            if not self._released:
                self._conn.rollback()
        finally:
            self.written = 0
            self._release()

    def _release(self) -> None:
        if not self._released:
            self._released = True
            self._pool.putconn(self._conn)


class PostgresAwardStore(AwardStore):
    """
    Award store backed by the `public.awards` table.

    Parameters
    ----------
    pool : ConnectionPool, optional
        Pool to draw connections from. Defaults to the shared PoolManager pool,
        or a private pool when `dsn_override` is given.
    dsn_override : str, optional
        Connect to this DSN instead of the one built from settings.
    """

    name: str = "postgres"

    def __init__(self, pool: Optional[ConnectionPool] = None, dsn_override: Optional[str] = None) -> None:
        super().__init__()
        self._owns_pool = False
        if pool is not None:
            self._pool = pool
        elif dsn_override:
            settings = get_settings()
            self._pool = ConnectionPool(
                conninfo=dsn_override,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                open=True,
            )
            self._owns_pool = True
        else:
            self._pool = get_sync_pool()

    @connect_retry
    def _checkout(self) -> Connection:
        return self._pool.getconn()

    def ensure_schema(self) -> None:
        """Create the awards table if it does not exist."""
        try:
            with self._pool.connection() as conn:
                conn.execute(SCHEMA_SQL)
        except (psycopg.Error, PoolTimeout) as exc:
            raise StorageFailure(f"Failed to create schema: {exc}") from exc
        log.info("Awards schema ensured", extra={"store": self.name})

    def _open_replace(self) -> ReplaceTransaction:
        try:
            conn = self._checkout()
        except (psycopg.Error, PoolTimeout) as exc:
            raise StorageFailure(f"Could not acquire a database connection: {exc}") from exc
        tx = _PostgresReplace(self._pool, conn)
        try:
            tx.begin()
        except CommitFailure:
            tx.rollback()
            raise
        return tx

    def winners(self) -> List[WinnerRow]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(WINNERS_SQL, (WINNER_TOKEN,))
                    rows = cur.fetchall()
        except (psycopg.Error, PoolTimeout) as exc:
            raise StorageFailure(f"Failed to read winners: {exc}") from exc
        return [WinnerRow(producers=producers, year=year) for producers, year in rows]

    def count(self) -> int:
        try:
            with self._pool.connection() as conn:
                row = conn.execute("SELECT COUNT(*) FROM public.awards;").fetchone()
        except (psycopg.Error, PoolTimeout) as exc:
            raise StorageFailure(f"Failed to count awards: {exc}") from exc
        return int(row[0]) if row else 0

    def close(self) -> None:
        if self._owns_pool:
            self._pool.close()


__all__ = ["PostgresAwardStore", "SCHEMA_SQL"]
