"""
In-memory award store, the default backend.

Content lives in an immutable snapshot that is swapped in a single assignment
on commit. Readers grab the current snapshot reference and never lock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from award_intervals.domain.models import AwardRecord, WinnerRow
from award_intervals.storage.abstract import AwardStore, ReplaceTransaction


@dataclass(frozen=True)
class _Snapshot:
    records: Tuple[AwardRecord, ...] = field(default_factory=tuple)
    winners: Tuple[WinnerRow, ...] = field(default_factory=tuple)


def _build_snapshot(records: Sequence[AwardRecord]) -> _Snapshot:
    winners = sorted(
        (WinnerRow(producers=r.producers, year=r.year) for r in records if r.is_winner),
        key=lambda row: (row.producers, row.year),
    )
    return _Snapshot(records=tuple(records), winners=tuple(winners))


class _MemoryReplace(ReplaceTransaction):
    def __init__(self, store: "InMemoryAwardStore") -> None:
        super().__init__()
        self._store = store
        self._staged: List[AwardRecord] = []

    def write_batch(self, records: Sequence[AwardRecord]) -> None:
        self._staged.extend(records)
        self.written += len(records)

    def commit(self) -> None:
        self._store._snapshot = _build_snapshot(self._staged)
        self._staged = []

    def rollback(self) -> None:
        self._staged = []
        self.written = 0


class InMemoryAwardStore(AwardStore):
    """
    Process-local store backed by an immutable snapshot.
    """

    name: str = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._snapshot = _Snapshot()

    def _open_replace(self) -> ReplaceTransaction:
        return _MemoryReplace(self)

    def winners(self) -> List[WinnerRow]:
        return list(self._snapshot.winners)

    def records(self) -> List[AwardRecord]:
        return list(self._snapshot.records)

    def count(self) -> int:
        return len(self._snapshot.records)


__all__ = ["InMemoryAwardStore"]
