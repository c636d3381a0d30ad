"""Resolve the dashboard status of a CI run."""

from enum import Enum

from psap.ci_dashboard.messages import flake_messages, is_known_flake
from psap.ci_dashboard.models.test_result import TestResult


class Status(str, Enum):
    """Closed set of states a run is shown with."""

    SUCCESS = "success"
    KNOWN_FLAKE = "known_flake"
    STEP_MISSING = "step_missing"
    STEP_SUCCESS = "step_success"
    STEP_FAILED = "step_failed"
    PARSING_ERROR = "parsing_error"


_DESCRIPTIONS: dict[Status, str] = {
    Status.SUCCESS: "Test passed",
    Status.KNOWN_FLAKE: "Test failed because of a known flake: ",
    Status.STEP_SUCCESS: "Test failed but the operator step passed",
    Status.STEP_FAILED: "Test failed because the operator step failed",
    Status.STEP_MISSING: "Test failed but operator step wasn't executed",
}


def resolve_status(result: TestResult) -> Status:
    """Classify a run into a single status.

    The checks are ordered and the first match wins: the raw fields are not
    mutually exclusive (a known flake may still have a passing step).

    Args:
        result: Fetched run outcome

    Returns:
        The status of the run

    """
    if result.passed:
        return Status.SUCCESS
    if is_known_flake(result):
        return Status.KNOWN_FLAKE
    if not result.step_executed:
        return Status.STEP_MISSING
    if result.step_passed is True:
        return Status.STEP_SUCCESS
    if result.step_passed is False:
        return Status.STEP_FAILED
    # step ran but its outcome could not be read
    return Status.PARSING_ERROR


def describe_status(result: TestResult, status: Status) -> str:
    """Human readable description of a run status."""
    if status is Status.KNOWN_FLAKE:
        msg = _DESCRIPTIONS[status]
        for flake in flake_messages(result):
            msg += "\n- " + flake
        return msg

    if status in _DESCRIPTIONS:
        return _DESCRIPTIONS[status]

    return (
        f"Test: {str(result.passed).lower()}, "
        f"Step: {_format_step_passed(result.step_passed)} "
        f"(status: {status.value})"
    )


def _format_step_passed(step_passed: bool | None) -> str:
    if step_passed is None:
        return "unknown"
    return str(step_passed).lower()
