"""
Utilities package for the award interval engine.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of domain-specific logic.
"""

from award_intervals.utils.logging import configure_logging, get_logger
from award_intervals.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
