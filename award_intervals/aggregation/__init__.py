from award_intervals.aggregation.intervals import (
    ProducerWinHistory,
    aggregate,
    build_win_histories,
    split_producers,
)

__all__ = ["ProducerWinHistory", "aggregate", "build_win_histories", "split_producers"]
