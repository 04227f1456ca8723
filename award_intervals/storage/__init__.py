"""
Storage package for the award interval engine.

Re-exports the store interface and the concrete backends, and selects a
backend from settings. The PostgreSQL backend is imported lazily so the
in-memory default works without a database driver being configured.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from award_intervals.config import Settings, get_settings
from award_intervals.storage.abstract import AwardStore, ReplaceTransaction, batched
from award_intervals.storage.memory import InMemoryAwardStore


def _postgres_store() -> AwardStore:
    from award_intervals.storage.postgres import PostgresAwardStore

    store = PostgresAwardStore()
    store.ensure_schema()
    return store


def _store_factories() -> Dict[str, Callable[[], AwardStore]]:
    """Registry of available store backends."""
    return {
        "memory": InMemoryAwardStore,
        "postgres": _postgres_store,
    }


def available_backends() -> List[str]:
    """List available backend names."""
    return sorted(_store_factories().keys())


def build_store(settings: Optional[Settings] = None) -> AwardStore:
    """Instantiate the backend named by `settings.store_backend`."""
    settings = settings or get_settings()
    factories = _store_factories()
    if settings.store_backend not in factories:
        raise ValueError(
            f"Unknown store backend '{settings.store_backend}'. Available: {', '.join(factories)}"
        )
    return factories[settings.store_backend]()


__all__ = [
    "AwardStore",
    "InMemoryAwardStore",
    "ReplaceTransaction",
    "available_backends",
    "batched",
    "build_store",
]
