"""Derive artifacts, job viewer and commit URLs of CI runs."""

import logging

from psap.ci_dashboard.models.matrix import MatrixSpec, TestSpec
from psap.ci_dashboard.models.test_result import TestResult

INVALID_URL = "INVALID"
DEFAULT_REPOSITORY_URL = "https://github.com/openshift-psap/ci-artifacts"


class MissingTestSpecError(ValueError):
    """A run has no test attached, its links cannot be derived."""

    def __init__(self, result: TestResult) -> None:
        """Initialize with the run lacking its test."""
        super().__init__(f"Build {result.build_id or '<unknown>'} has no test spec")
        self.result = result


class LinkResolver:
    """Builds the URLs shown for each CI run of the dashboard."""

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize resolver with the logger receiving its diagnostics."""
        self.logger = logger

    def artifacts_url(self, matrix: MatrixSpec, result: TestResult) -> str:
        """Artifacts browser URL of a run, or ``INVALID`` without a test spec."""
        try:
            return self.resolve_artifacts_url(matrix, result)
        except MissingTestSpecError as e:
            self.logger.error(f"Cannot build artifacts URL: {e}")
            return INVALID_URL

    def resolve_artifacts_url(self, matrix: MatrixSpec, result: TestResult) -> str:
        """Artifacts browser URL of a run.

        Args:
            matrix: Matrix the run's test belongs to
            result: The run

        Returns:
            The URL of the run artifacts

        Raises:
            MissingTestSpecError: If the run has no test attached

        """
        test = result.test_spec
        if test is None:
            raise MissingTestSpecError(result)

        if matrix.effective_prow_type(test) == "presubmit":
            base = self._presubmit_base(matrix, test, result)
        else:
            step = test.prow_step or matrix.prow_step
            base = (
                f"{matrix.artifacts_url}/{test.prow_name}/{result.build_id}"
                f"/artifacts/{test.test_name}/{step}"
            )

        if not test.is_ci_operator:
            return base
        if base.endswith("/"):
            return base + "artifacts"
        return base + "/artifacts"

    def _presubmit_base(
        self, matrix: MatrixSpec, test: TestSpec, result: TestResult
    ) -> str:
        if not result.pull_number:
            # still build the link, the rest of the report must render
            self.logger.warning(
                f"Missing pull number for presubmit test {test.test_name} "
                f"(matrix {matrix.name}, build {result.build_id})"
            )
        return (
            f"{matrix.artifacts_url}/pull/{result.pull_number}"
            f"/{test.prow_name}/{result.build_id}/"
        )

    def viewer_url(self, matrix: MatrixSpec, prow_name: str, result: TestResult) -> str:
        """Job viewer (Spyglass) URL of a run."""
        return f"{matrix.viewer_url}/{prow_name}/{result.build_id}"

    def repository_url(self, matrix: MatrixSpec, result: TestResult) -> str:
        """URL of the CI sources commit a run was executed with."""
        base = matrix.repository_url or DEFAULT_REPOSITORY_URL
        return f"{base}/commit/{result.ci_artifacts_version}"
