"""Fixed-width history window of the dashboard."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def missing_history(actual_count: int, test_history: int) -> list[int]:
    """Positions of the "no data" slots completing a test history.

    Args:
        actual_count: Number of runs available for the test
        test_history: Configured history depth, negative for unbounded

    Returns:
        Positions ``actual_count`` to ``test_history - 1``; empty when the
        history is unbounded or already full

    """
    if test_history < 0:
        return []
    return list(range(actual_count, test_history))


def truncate_history(results: Sequence[T], test_history: int) -> list[T]:
    """Keep the ``test_history`` most recent runs, all of them if negative."""
    if test_history < 0:
        return list(results)
    return list(results[:test_history])
