"""Tests for the history window."""

import pytest

from psap.ci_dashboard.history import missing_history, truncate_history


def test_missing_history_pads_to_depth() -> None:
    """Two runs out of five leave three no-data slots."""
    assert missing_history(2, 5) == [2, 3, 4]


@pytest.mark.parametrize("actual_count", [0, 3, 100])
def test_missing_history_unbounded(actual_count: int) -> None:
    """A negative depth never produces placeholders."""
    assert missing_history(actual_count, -1) == []


@pytest.mark.parametrize(("actual_count", "depth"), [(5, 5), (7, 5), (0, 0)])
def test_missing_history_full(actual_count: int, depth: int) -> None:
    """A full (or overfull) history needs no placeholder."""
    assert missing_history(actual_count, depth) == []


def test_missing_history_without_runs() -> None:
    """A test without any run is all placeholders."""
    assert missing_history(0, 3) == [0, 1, 2]


def test_truncate_history() -> None:
    """truncate_history keeps the most recent runs."""
    assert truncate_history(["4", "3", "2", "1"], 2) == ["4", "3"]


def test_truncate_history_unbounded() -> None:
    """A negative depth keeps every run."""
    assert truncate_history(["4", "3", "2", "1"], -1) == ["4", "3", "2", "1"]
