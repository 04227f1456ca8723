"""
Single-entry cache for the aggregated award intervals.

The cache holds at most one `AggregationResult` under a fixed key and is
invalidated by the store whenever its content is replaced. Each invalidation
starts a new generation; a result computed from an older generation is
refused by `set`, so a query racing a replace can never leave a stale value
behind.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from award_intervals.domain.models import AggregationResult
from award_intervals.utils.logging import get_logger

log = get_logger(__name__)

CACHE_KEY = "award_intervals"


class ResultCache:
    """
    Thread-safe memo for one aggregation result per store generation.

    Parameters
    ----------
    enabled : bool
        When False, `get` always misses and `set` is a no-op.
    ttl_seconds : float, optional
        Expire a cached value after this many seconds. None keeps it until
        the next invalidation.
    """

    def __init__(self, enabled: bool = True, ttl_seconds: Optional[float] = None) -> None:
        self.enabled = enabled
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._generation = 0
        self._value: Optional[AggregationResult] = None
        self._expires_at: Optional[float] = None

    @property
    def generation(self) -> int:
        """Token to pass back to `set` for results computed from now on."""
        with self._lock:
            return self._generation

    def get(self) -> Optional[AggregationResult]:
        if not self.enabled:
            return None
        with self._lock:
            if self._value is None:
                return None
            if self._expires_at is not None and time.monotonic() >= self._expires_at:
                log.debug("Cached intervals expired", extra={"cache_key": CACHE_KEY})
                self._value = None
                self._expires_at = None
                return None
            return self._value

    def set(self, result: AggregationResult, generation: Optional[int] = None) -> bool:
        """
        Store `result` unless it was computed before the latest invalidation.

        Returns
        -------
        bool
            Whether the value was cached.
        """
        if not self.enabled:
            return False
        with self._lock:
            if generation is not None and generation != self._generation:
                log.debug(
                    "Discarding intervals computed from a replaced store",
                    extra={"cache_key": CACHE_KEY, "generation": generation},
                )
                return False
            self._value = result
            self._expires_at = (
                time.monotonic() + self.ttl_seconds if self.ttl_seconds is not None else None
            )
            return True

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._value = None
            self._expires_at = None
        log.info("Interval cache invalidated", extra={"cache_key": CACHE_KEY})


__all__ = ["CACHE_KEY", "ResultCache"]
