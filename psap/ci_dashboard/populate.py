"""Fill the matrices configuration with the fetched CI runs."""

import asyncio
import logging

from psap.ci_dashboard.models.matrix import MatricesSpec, MatrixSpec, TestSpec
from psap.ci_dashboard.models.test_result import TestResult
from psap.ci_dashboard.providers.base import ResultsProvider

logger = logging.getLogger(__name__)


class MatrixPopulator:
    """Fetches the history of every test of the matrices."""

    def __init__(self, provider: ResultsProvider) -> None:
        """Initialize populator with a results provider."""
        self.provider = provider

    async def populate(self, spec: MatricesSpec, test_history: int) -> MatricesSpec:
        """Fetch the runs of all tests concurrently.

        Args:
            spec: Parsed matrices configuration
            test_history: Number of runs to fetch per test, negative for all

        Returns:
            A copy of ``spec`` where every test holds its runs, most recent
            first. A test whose fetch failed holds no run.

        """
        targets = [
            (matrix_name, group, index, test)
            for matrix_name, matrix in spec.matrices.items()
            for group, tests in matrix.tests.items()
            for index, test in enumerate(tests)
        ]
        logger.info(f"Fetching history of {len(targets)} tests")

        histories = await asyncio.gather(
            *(
                self.provider.fetch_history(
                    spec.matrices[matrix_name], test, test_history
                )
                for matrix_name, _, _, test in targets
            ),
            return_exceptions=True,
        )

        populated: dict[tuple[str, str, int], tuple[TestResult, ...]] = {}
        for (matrix_name, group, index, test), history in zip(
            targets, histories, strict=True
        ):
            populated[(matrix_name, group, index)] = self._process_history(
                matrix_name, test, history
            )

        matrices = {
            name: self._populate_matrix(name, matrix, populated)
            for name, matrix in spec.matrices.items()
        }
        return spec.model_copy(update={"test_history": test_history, "matrices": matrices})

    def _process_history(
        self,
        matrix_name: str,
        test: TestSpec,
        history: list[TestResult] | BaseException,
    ) -> tuple[TestResult, ...]:
        """Keep fetched runs, log fetch errors."""
        test_id = f"{matrix_name}/{test.test_name}"
        if isinstance(history, BaseException):
            if not isinstance(history, Exception):
                raise history
            logger.error(
                f"Failed to fetch history of {test_id}: "
                f"{type(history).__name__}: {history}",
                exc_info=history,
            )
            return ()

        logger.info(f"Fetched {len(history)} runs of {test_id}")
        return tuple(history)

    def _populate_matrix(
        self,
        name: str,
        matrix: MatrixSpec,
        populated: dict[tuple[str, str, int], tuple[TestResult, ...]],
    ) -> MatrixSpec:
        tests = {
            group: tuple(
                test.model_copy(update={"old_tests": populated[(name, group, index)]})
                for index, test in enumerate(group_tests)
            )
            for group, group_tests in matrix.tests.items()
        }
        return matrix.model_copy(update={"tests": tests})
