"""Assemble the resolved dashboard data handed to the renderer."""

import logging

from pydantic import BaseModel, ConfigDict, Field

from psap.ci_dashboard.history import missing_history, truncate_history
from psap.ci_dashboard.links import LinkResolver
from psap.ci_dashboard.messages import MESSAGE_TYPES_DISPLAY_ORDER, messages_of
from psap.ci_dashboard.models.matrix import MatricesSpec, MatrixSpec, TestSpec
from psap.ci_dashboard.models.test_result import TestResult
from psap.ci_dashboard.status import Status, describe_status, resolve_status

logger = logging.getLogger(__name__)


class RunView(BaseModel):
    """One resolved run of a test."""

    model_config = ConfigDict(frozen=True)

    result: TestResult = Field(..., description="The raw run")
    status: Status = Field(..., description="Resolved status")
    status_description: str = Field(..., description="Status description")
    artifacts_url: str = Field(..., description="Artifacts browser URL")
    viewer_url: str = Field(..., description="Job viewer URL")
    repository_url: str = Field(..., description="CI sources commit URL")
    messages: list[tuple[str, dict[str, str]]] = Field(
        default_factory=list,
        description="Non-empty message categories, in display order",
    )


class TestView(BaseModel):
    """One test with its resolved history."""

    model_config = ConfigDict(frozen=True)

    spec: TestSpec = Field(..., description="The test")
    runs: list[RunView] = Field(default_factory=list, description="Most recent first")
    missing_history: list[int] = Field(
        default_factory=list, description="Positions of the no-data slots"
    )

    @property
    def latest_status(self) -> Status | None:
        """Status of the most recent run, None without any run."""
        return self.runs[0].status if self.runs else None


class GroupView(BaseModel):
    """A group of tests of a matrix."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Group key from the configuration")
    name: str = Field(..., description="Group name shown in the report")
    tests: list[TestView] = Field(default_factory=list, description="Tests")


class MatrixView(BaseModel):
    """A matrix with all its resolved tests."""

    model_config = ConfigDict(frozen=True)

    spec: MatrixSpec = Field(..., description="The matrix")
    groups: list[GroupView] = Field(default_factory=list, description="Test groups")


class MatrixReport(BaseModel):
    """Everything the renderer needs to lay out the dashboard."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(default="", description="Dashboard description")
    generation_date: str = Field(..., description="When the report was built")
    test_history: int = Field(..., description="History depth, negative for all")
    matrices: list[MatrixView] = Field(default_factory=list, description="Matrices")


def group_name(group_key: str) -> str:
    """Display name of a test group.

    Group keys may carry an ordering prefix, ``"01|GPU Operator"`` is shown
    as ``"GPU Operator"``.
    """
    _, sep, name = group_key.partition("|")
    return name if sep else group_key


def build_report(
    spec: MatricesSpec,
    generation_date: str,
    link_resolver: LinkResolver,
) -> MatrixReport:
    """Resolve status, links and history window of every test run.

    Args:
        spec: Matrices configuration, populated with the fetched runs
        generation_date: Date shown in the report
        link_resolver: Resolver of the run URLs

    Returns:
        The report data

    """
    matrices = [
        _build_matrix(matrix, spec.test_history, link_resolver)
        for matrix in spec.matrices.values()
    ]
    logger.info(f"Report built for {len(matrices)} matrices")
    return MatrixReport(
        description=spec.description,
        generation_date=generation_date,
        test_history=spec.test_history,
        matrices=matrices,
    )


def _build_matrix(
    matrix: MatrixSpec, test_history: int, link_resolver: LinkResolver
) -> MatrixView:
    groups = [
        GroupView(
            key=key,
            name=group_name(key),
            tests=[
                _build_test(matrix, test, test_history, link_resolver)
                for test in matrix.tests[key]
            ],
        )
        for key in sorted(matrix.tests)
    ]
    return MatrixView(spec=matrix, groups=groups)


def _build_test(
    matrix: MatrixSpec,
    test: TestSpec,
    test_history: int,
    link_resolver: LinkResolver,
) -> TestView:
    runs = [
        _build_run(matrix, test, result, link_resolver)
        for result in truncate_history(test.old_tests, test_history)
    ]
    return TestView(
        spec=test,
        runs=runs,
        missing_history=missing_history(len(runs), test_history),
    )


def _build_run(
    matrix: MatrixSpec,
    test: TestSpec,
    result: TestResult,
    link_resolver: LinkResolver,
) -> RunView:
    status = resolve_status(result)
    if status is Status.PARSING_ERROR:
        logger.warning(
            f"Could not resolve the status of {test.test_name} "
            f"build {result.build_id}: step executed without outcome"
        )

    messages = [
        (message_type.value, messages_of(result, message_type))
        for message_type in MESSAGE_TYPES_DISPLAY_ORDER
        if messages_of(result, message_type)
    ]

    return RunView(
        result=result,
        status=status,
        status_description=describe_status(result, status),
        artifacts_url=link_resolver.artifacts_url(matrix, result),
        viewer_url=link_resolver.viewer_url(matrix, test.prow_name, result),
        repository_url=link_resolver.repository_url(matrix, result),
        messages=messages,
    )
