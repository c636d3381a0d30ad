"""Tests for CI run result models."""

import pytest
from pydantic import ValidationError

from psap.ci_dashboard.models.matrix import TestSpec
from psap.ci_dashboard.models.test_result import (
    MessageType,
    TestResult,
    ToolboxStepResult,
)


def test_test_result_minimal() -> None:
    """TestResult accepts minimal required fields."""
    result = TestResult(build_id="1234", passed=False)
    assert result.build_id == "1234"
    assert result.passed is False
    assert result.step_executed is False
    assert result.step_passed is None
    assert result.messages == {}
    assert result.pull_number == ""
    assert result.test_spec is None
    assert result.flake_failure is False


def test_test_result_missing_required_fields() -> None:
    """TestResult requires build_id and passed."""
    with pytest.raises(ValidationError) as exc_info:
        TestResult()  # type: ignore[call-arg]
    errors = str(exc_info.value)
    assert "build_id" in errors
    assert "passed" in errors


def test_test_result_messages_by_category_name() -> None:
    """Message categories are parsed from their names."""
    result = TestResult.model_validate(
        {
            "build_id": "1",
            "passed": False,
            "messages": {"flake": {"step:3": "quay.io timeout"}},
        }
    )
    assert result.messages == {MessageType.FLAKE: {"step:3": "quay.io timeout"}}


def test_test_result_invalid_message_category() -> None:
    """TestResult rejects unknown message categories."""
    with pytest.raises(ValidationError):
        TestResult.model_validate(
            {"build_id": "1", "passed": False, "messages": {"debug": {"k": "v"}}}
        )


def test_test_result_test_spec_not_serialized() -> None:
    """The attached test is left out of serialization."""
    result = TestResult(build_id="1", passed=True, test_spec=TestSpec(test_name="e2e"))
    assert result.test_spec is not None
    assert "test_spec" not in result.model_dump()


def test_test_result_is_frozen() -> None:
    """TestResult cannot be modified after construction."""
    result = TestResult(build_id="1", passed=True)
    with pytest.raises(ValidationError):
        result.passed = False  # type: ignore[misc]


def test_message_type_markers() -> None:
    """Each category has its artifact marker."""
    assert MessageType.INFO.marker == "_INFO"
    assert MessageType.WARNING.marker == "_WARNING"
    assert MessageType.ERROR.marker == "_ERROR"
    assert MessageType.FLAKE.marker == "_FLAKE"


def test_toolbox_step_result_defaults() -> None:
    """ToolboxStepResult counters default to zero."""
    step = ToolboxStepResult(name="deploy")
    assert (step.ok, step.failures, step.ignored) == (0, 0, 0)
    assert step.flake_failure == ""
