"""
Producer win-interval aggregation.

Given the winning rows, build each producer's win history, compute the gap
between every pair of chronologically consecutive wins and keep the global
minimum and maximum tie sets.

Processing order is fixed (producers by sanitized name, pairs by year) so the
same rows always produce the same lists in the same order.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List

from award_intervals.domain.models import AggregationResult, IntervalRecord, WinnerRow
from award_intervals.ingest.validator import sanitize
from award_intervals.utils.logging import get_logger

log = get_logger(__name__)

_AND_SEPARATOR = re.compile(r"\s+and\s+")

ProducerWinHistory = Dict[str, List[int]]


def split_producers(producers: str) -> List[str]:
    """
    Split a composite producers field into sanitized individual names.

    "A, B and C" -> ["A", "B", "C"]. Names that sanitize to nothing are dropped.
    """
    names = _AND_SEPARATOR.sub(",", producers).split(",")
    return [name for name in (sanitize(raw) for raw in names) if name]


def build_win_histories(rows: Iterable[WinnerRow]) -> ProducerWinHistory:
    """
    Map each producer to the years of the winning rows they appear on.

    Years keep row order and duplicates; sorting happens during aggregation.
    """
    histories: ProducerWinHistory = {}
    for row in rows:
        for producer in split_producers(row.producers):
            histories.setdefault(producer, []).append(row.year)
    return histories


def aggregate(rows: Iterable[WinnerRow]) -> AggregationResult:
    """
    Compute the minimum and maximum consecutive-win interval tie sets.

    Returns an empty result when no producer has two or more wins.
    """
    histories = build_win_histories(rows)

    min_interval = None
    max_interval = None
    min_results: List[IntervalRecord] = []
    max_results: List[IntervalRecord] = []

    for producer in sorted(histories):
        years = sorted(histories[producer])
        for previous_win, following_win in zip(years, years[1:]):
            interval = following_win - previous_win
            record = IntervalRecord(
                producer=producer,
                interval=interval,
                previous_win=previous_win,
                following_win=following_win,
            )

            if min_interval is None or interval < min_interval:
                min_interval = interval
                min_results = [record]
            elif interval == min_interval:
                min_results.append(record)

            if max_interval is None or interval > max_interval:
                max_interval = interval
                max_results = [record]
            elif interval == max_interval:
                max_results.append(record)

    log.info(
        "Award intervals computed",
        extra={
            "producers": len(histories),
            "min_interval": min_interval,
            "max_interval": max_interval,
        },
    )
    return AggregationResult(min=min_results, max=max_results)


__all__ = ["ProducerWinHistory", "aggregate", "build_win_histories", "split_producers"]
