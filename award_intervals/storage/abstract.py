"""
Store interfaces for award records.

Concrete stores (in-memory, PostgreSQL) implement `AwardStore` and hand out
`ReplaceTransaction` objects. A replace stages batches without holding the
store's write lock; only the final commit takes the lock, so readers observe
either the previous content or the new content and never a mix of the two.
"""

from __future__ import annotations

import abc
import threading
from contextlib import contextmanager
from itertools import islice
from typing import Callable, Iterable, Iterator, List, Sequence

from award_intervals.domain.models import AwardRecord, WinnerRow
from award_intervals.utils.logging import get_logger

log = get_logger(__name__)

ReplaceListener = Callable[[], None]


def batched(records: Iterable[AwardRecord], batch_size: int) -> Iterator[List[AwardRecord]]:
    """
    Yield consecutive lists of at most `batch_size` records.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    iterator = iter(records)
    while True:
        batch = list(islice(iterator, batch_size))
        if not batch:
            break
        yield batch


class ReplaceTransaction(abc.ABC):
    """
    Staged replacement of the full store content.

    `written` counts staged records; they only become visible on commit.
    """

    def __init__(self) -> None:
        self.written = 0

    @abc.abstractmethod
    def write_batch(self, records: Sequence[AwardRecord]) -> None:
        """Stage one batch. Raises CommitFailure on storage errors."""
        raise NotImplementedError

    @abc.abstractmethod
    def commit(self) -> None:  # pragma: no cover - interface only
        """Atomically install the staged records. Raises CommitFailure."""
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:  # pragma: no cover - interface only
        """Discard the staged records."""
        raise NotImplementedError


class AwardStore(abc.ABC):
    """
    Holds the current set of award records.

    Subclasses implement `_open_replace`, `winners` and `count`; the
    commit/rollback protocol, the write lock and the replace listeners live here.
    """

    name: str = "abstract"

    def __init__(self) -> None:
        self._write_lock = threading.Lock()
        self._listeners: List[ReplaceListener] = []

    def add_replace_listener(self, listener: ReplaceListener) -> None:
        """Register a callback run synchronously after every committed replace."""
        self._listeners.append(listener)

    @abc.abstractmethod
    def _open_replace(self) -> ReplaceTransaction:
        """Start a replace transaction. Raises StorageFailure if that is impossible."""
        raise NotImplementedError

    @contextmanager
    def begin_replace(self) -> Iterator[ReplaceTransaction]:
        """
        Open a replace transaction that commits on clean exit.

        Any exception raised inside the block rolls the transaction back and
        propagates; the previous store content stays untouched.

        Example
        -------
            with store.begin_replace() as tx:
                tx.write_batch(records)
        """
        tx = self._open_replace()
        try:
            yield tx
        except BaseException:
            self._rollback_quietly(tx)
            raise

        with self._write_lock:
            try:
                tx.commit()
            except BaseException:
                self._rollback_quietly(tx)
                raise
            for listener in self._listeners:
                listener()
        log.info(
            f"[{self.name}] replace committed",
            extra={"store": self.name, "records": tx.written},
        )

    def replace_all(self, records: Iterable[AwardRecord], batch_size: int = 1000) -> int:
        """
        Discard all records and install `records` atomically.

        Returns
        -------
        int
            Number of records installed.
        """
        with self.begin_replace() as tx:
            for batch in batched(records, batch_size):
                tx.write_batch(batch)
        return tx.written

    @abc.abstractmethod
    def winners(self) -> List[WinnerRow]:
        """Winning rows ordered by producers, then year (both ascending)."""
        raise NotImplementedError

    @abc.abstractmethod
    def count(self) -> int:
        """Number of records currently held."""
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources. No-op by default."""

    def _rollback_quietly(self, tx: ReplaceTransaction) -> None:
        try:
            tx.rollback()
        except Exception:  # noqa: BLE001 - the original failure is what propagates
            log.exception(f"[{self.name}] rollback failed", extra={"store": self.name})


__all__ = ["AwardStore", "ReplaceListener", "ReplaceTransaction", "batched"]
