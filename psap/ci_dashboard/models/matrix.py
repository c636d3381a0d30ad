"""Models for the test matrices configuration."""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from psap.ci_dashboard.models.test_result import TestResult

logger = logging.getLogger(__name__)

ProwType = Literal["periodic", "presubmit"]

PROW_TYPES: tuple[str, ...] = ("periodic", "presubmit")
DEFAULT_PROW_TYPE: ProwType = "periodic"


class TestSpec(BaseModel):
    """One test of a matrix."""

    model_config = ConfigDict(frozen=True)

    test_name: str = Field(default="", description="Test name")
    branch: str = Field(default="", description="Branch being tested")
    operator_version: str = Field(default="", description="Operator version label")
    variant: str = Field(default="", description="Variant label")
    prow_step: str = Field(
        default="", description="CI step, overrides the matrix step when set"
    )
    prow_name: str = Field(default="", description="CI job name")
    display_name: str = Field(default="", description="CI job display name")
    prow_type: ProwType | None = Field(
        default=None, description="Trigger type, overrides the matrix trigger type"
    )
    is_ci_operator: bool = Field(
        default=True, description="Whether the job runs under the CI operator"
    )

    old_tests: tuple[TestResult, ...] = Field(
        default=(),
        exclude=True,
        repr=False,
        description="Fetched results, most recent first",
    )

    @field_validator("is_ci_operator", mode="before")
    @classmethod
    def _default_is_ci_operator(cls, value: object) -> object:
        return True if value is None else value

    @field_validator("prow_type", mode="before")
    @classmethod
    def _check_prow_type(cls, value: object) -> object:
        if value in (None, ""):
            return None
        if value not in PROW_TYPES:
            logger.warning(f"Unknown prow_type '{value}' on test, ignoring it")
            return None
        return value

    @property
    def job_display_name(self) -> str:
        """Name under which the CI job is shown."""
        return self.display_name or self.prow_name


class MatrixSpec(BaseModel):
    """A named group of tests sharing the same CI conventions."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Matrix name")
    description: str = Field(default="", description="Human description")
    viewer_url: str = Field(default="", description="Job viewer base URL")
    artifacts_url: str = Field(default="", description="Artifacts browser base URL")
    artifacts_cache: str = Field(default="", description="Artifacts cache location")
    prow_config: str = Field(default="", description="CI configuration identifier")
    prow_step: str = Field(default="", description="CI step of the tests")
    operator_name: str = Field(default="", description="Owning component name")
    repository_url: str = Field(default="", description="Source repository URL")
    tests: dict[str, tuple[TestSpec, ...]] = Field(
        default_factory=dict, description="Test group key to ordered tests"
    )
    prow_type: ProwType = Field(
        default=DEFAULT_PROW_TYPE, description="Trigger type of the matrix jobs"
    )

    @field_validator("prow_type", mode="before")
    @classmethod
    def _default_prow_type(cls, value: object) -> object:
        if value in (None, ""):
            return DEFAULT_PROW_TYPE
        if value not in PROW_TYPES:
            logger.warning(
                f"Unknown prow_type '{value}', using '{DEFAULT_PROW_TYPE}'"
            )
            return DEFAULT_PROW_TYPE
        return value

    def effective_prow_type(self, test: TestSpec) -> ProwType:
        """Trigger type of a test, the test override taking precedence."""
        return test.prow_type or self.prow_type


class MatricesSpec(BaseModel):
    """The whole matrices configuration file."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(..., description="Configuration schema version")
    description: str = Field(default="", description="Dashboard description")
    test_history: int = Field(
        default=-1, description="Number of runs to show per test, -1 for all"
    )
    matrices: dict[str, MatrixSpec] = Field(
        default_factory=dict, description="Matrix name to matrix"
    )

    @model_validator(mode="before")
    @classmethod
    def _name_matrices(cls, data: object) -> object:
        if not isinstance(data, dict):
            return data
        matrices = data.get("matrices")
        if not isinstance(matrices, dict):
            return data

        named: dict[str, object] = {}
        for key, matrix in matrices.items():
            if isinstance(matrix, dict) and not matrix.get("name"):
                matrix = {**matrix, "name": key}
            elif isinstance(matrix, MatrixSpec) and not matrix.name:
                matrix = matrix.model_copy(update={"name": key})
            named[key] = matrix
        return {**data, "matrices": named}


# TestResult refers back to TestSpec, resolve it now that both exist
TestResult.model_rebuild()
TestSpec.model_rebuild()
MatrixSpec.model_rebuild()
MatricesSpec.model_rebuild()
