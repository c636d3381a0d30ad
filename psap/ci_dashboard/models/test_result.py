"""Models for fetched CI run results."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from psap.ci_dashboard.models.matrix import TestSpec


class MessageType(str, Enum):
    """Severity of a diagnostic message extracted from a run."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FLAKE = "flake"

    @property
    def marker(self) -> str:
        """Marker written in the CI artifacts for this kind of message."""
        return f"_{self.name}"


class ToolboxStepResult(BaseModel):
    """Outcome counters of one toolbox step of a run."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Toolbox step name")
    ok: int = Field(default=0, description="Number of successful tasks")
    failures: int = Field(default=0, description="Number of failed tasks")
    ignored: int = Field(default=0, description="Number of ignored failures")
    expected_failure: str = Field(
        default="", description="Reason when the failure was expected"
    )
    flake_failure: str = Field(
        default="", description="Reason when the failure is a known flake"
    )


class TestResult(BaseModel):
    """Outcome of one CI run of a test."""

    model_config = ConfigDict(frozen=True)

    build_id: str = Field(..., description="CI build identifier")
    passed: bool = Field(..., description="Overall outcome of the run")
    result: str = Field(default="", description="Raw result label (e.g. SUCCESS)")
    finish_date: str = Field(default="", description="When the run finished")

    step_executed: bool = Field(
        default=False, description="Whether the tested step ran at all"
    )
    step_passed: bool | None = Field(
        default=None,
        description="Outcome of the tested step, None when it could not be read",
    )
    step_result: str = Field(default="", description="Raw step result label")

    messages: dict[MessageType, dict[str, str]] = Field(
        default_factory=dict,
        description="Diagnostic messages, by category then by message key",
    )

    operator_version: str = Field(default="", description="Operator version")
    openshift_version: str = Field(default="", description="OpenShift version")
    ci_artifacts_version: str = Field(
        default="", description="Commit of the CI sources used by the run"
    )
    pull_number: str = Field(
        default="", description="Pull request number (presubmit runs only)"
    )

    test_spec: TestSpec | None = Field(
        default=None, exclude=True, repr=False, description="Test this run belongs to"
    )

    toolbox_steps: tuple[str, ...] = Field(
        default=(), description="Toolbox steps executed by the run"
    )
    toolbox_steps_results: tuple[ToolboxStepResult, ...] = Field(
        default=(), description="Counters of each toolbox step"
    )

    ok: int = Field(default=0, description="Successful tasks over all steps")
    failures: int = Field(default=0, description="Failed tasks over all steps")
    ignored: int = Field(default=0, description="Ignored failures over all steps")

    flake_failure: bool = Field(
        default=False, description="Failure flagged as a flake by the CI itself"
    )
