"""
Infrastructure package for the award interval engine.

Centralizes database connectivity concerns (DSN, pooling, retries). Keep this
layer focused on I/O and resource management, decoupled from domain logic.
"""

from award_intervals.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    get_sync_connection,
    get_sync_pool,
)

__all__ = [
    "PoolManager",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
]
