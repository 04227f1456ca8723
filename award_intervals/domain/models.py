"""
Domain models for the award interval engine.

Defines the persisted award record shape, the winner projection read back from
storage, and the values produced by ingestion and interval aggregation. All
models are frozen so snapshots can be shared across threads without copying.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

WINNER_TOKEN = "yes"


class AwardRecord(BaseModel):
    """
    A validated row of the award list, as held by the store.
    """

    year: int = Field(..., ge=1900, le=2100, description="Award year.")
    title: str = Field(..., min_length=1, description="Sanitized title.")
    studios: str = Field(..., min_length=1, description="Sanitized studio list.")
    producers: str = Field(
        ..., min_length=1, description="Sanitized producer list, may hold several names."
    )
    winner: Optional[str] = Field(None, description="'yes' for winners, otherwise empty.")

    model_config = ConfigDict(frozen=True)

    @property
    def is_winner(self) -> bool:
        return self.winner == WINNER_TOKEN


class WinnerRow(BaseModel):
    """Projection of a winning record used by the aggregator."""

    producers: str
    year: int

    model_config = ConfigDict(frozen=True)


class IntervalRecord(BaseModel):
    """
    Gap between two chronologically consecutive wins of one producer.
    """

    producer: str
    interval: int = Field(..., ge=0)
    previous_win: int = Field(..., alias="previousWin")
    following_win: int = Field(..., alias="followingWin")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class AggregationResult(BaseModel):
    """
    Minimum and maximum interval tie sets.

    Both lists are empty together when no producer has two or more wins.
    """

    min: List[IntervalRecord] = Field(default_factory=list)
    max: List[IntervalRecord] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        return not self.min and not self.max

    def to_payload(self) -> Dict[str, Any]:
        """Serialize using the public camelCase field names."""
        return self.model_dump(by_alias=True)


class IngestStats(BaseModel):
    """Counters reported by a completed ingest."""

    total_rows: int = Field(0, alias="totalRows")
    inserted_rows: int = Field(0, alias="insertedRows")
    rejected_rows: int = Field(0, alias="rejectedRows")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class RowRejected(BaseModel):
    """
    A source row that failed validation. Counted and skipped, never raised.
    """

    line_number: int
    reason: str
    row: Mapping[str, Optional[str]] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


__all__ = [
    "WINNER_TOKEN",
    "AggregationResult",
    "AwardRecord",
    "IngestStats",
    "IntervalRecord",
    "RowRejected",
    "WinnerRow",
]
