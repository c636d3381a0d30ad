"""Abstract base class for CI results providers."""

import asyncio
import logging
from abc import ABC, abstractmethod

from psap.ci_dashboard.history import truncate_history
from psap.ci_dashboard.models.matrix import MatrixSpec, TestSpec
from psap.ci_dashboard.models.test_result import TestResult

logger = logging.getLogger(__name__)


class ResultsProvider(ABC):
    """Abstract base for sources of CI run results."""

    @abstractmethod
    async def list_builds(self, matrix: MatrixSpec, test: TestSpec) -> list[str]:
        """List the build identifiers of a test job.

        Args:
            matrix: Matrix the test belongs to
            test: Test whose job builds are listed

        Returns:
            Build identifiers, most recent first

        """

    @abstractmethod
    async def fetch_result(
        self, matrix: MatrixSpec, test: TestSpec, build_id: str
    ) -> TestResult:
        """Fetch the outcome of one build.

        Args:
            matrix: Matrix the test belongs to
            test: Test the build ran
            build_id: Build identifier from list_builds

        Returns:
            The run result, attached to ``test``

        """

    async def fetch_history(
        self, matrix: MatrixSpec, test: TestSpec, test_history: int
    ) -> list[TestResult]:
        """Fetch the most recent runs of a test.

        Args:
            matrix: Matrix the test belongs to
            test: Test whose runs are fetched
            test_history: Number of runs to fetch, negative for all of them

        Returns:
            Run results, most recent first. Builds that cannot be read, such
            as a build still running, are logged and left out.

        """
        build_ids = truncate_history(await self.list_builds(matrix, test), test_history)
        results = await asyncio.gather(
            *(self.fetch_result(matrix, test, build_id) for build_id in build_ids),
            return_exceptions=True,
        )

        history: list[TestResult] = []
        for build_id, result in zip(build_ids, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    f"Skipping build {build_id} of {test.test_name}: "
                    f"{type(result).__name__}: {result}"
                )
                continue
            history.append(result)
        return history
