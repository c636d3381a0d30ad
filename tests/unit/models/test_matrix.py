"""Tests for matrices configuration models."""

import pytest
from pydantic import ValidationError

from psap.ci_dashboard.models.matrix import MatricesSpec, MatrixSpec, TestSpec
from psap.ci_dashboard.models.test_result import TestResult


def test_test_spec_defaults() -> None:
    """TestSpec uses default values for optional fields."""
    test = TestSpec(test_name="e2e", prow_name="periodic-e2e")
    assert test.branch == ""
    assert test.prow_step == ""
    assert test.prow_type is None
    assert test.is_ci_operator is True
    assert test.old_tests == ()


def test_test_spec_null_is_ci_operator_means_true() -> None:
    """An explicit null is_ci_operator is resolved to True."""
    test = TestSpec.model_validate({"test_name": "e2e", "is_ci_operator": None})
    assert test.is_ci_operator is True


def test_test_spec_is_ci_operator_false() -> None:
    """is_ci_operator can be disabled."""
    test = TestSpec.model_validate({"test_name": "e2e", "is_ci_operator": False})
    assert test.is_ci_operator is False


def test_test_spec_unknown_prow_type_ignored() -> None:
    """An unknown test prow_type is dropped, the matrix one applies."""
    test = TestSpec.model_validate({"test_name": "e2e", "prow_type": "postsubmit"})
    assert test.prow_type is None


def test_test_spec_job_display_name() -> None:
    """job_display_name falls back to the job name."""
    assert TestSpec(prow_name="job").job_display_name == "job"
    assert TestSpec(prow_name="job", display_name="Job").job_display_name == "Job"


def test_test_spec_is_frozen() -> None:
    """TestSpec cannot be modified after construction."""
    test = TestSpec(test_name="e2e")
    with pytest.raises(ValidationError):
        test.test_name = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("prow_type", "expected"),
    [
        (None, "periodic"),
        ("", "periodic"),
        ("periodic", "periodic"),
        ("presubmit", "presubmit"),
        ("nightly", "periodic"),
    ],
)
def test_matrix_spec_prow_type_defaults(prow_type: str | None, expected: str) -> None:
    """MatrixSpec prow_type is always one of the two known values."""
    matrix = MatrixSpec.model_validate({"name": "m", "prow_type": prow_type})
    assert matrix.prow_type == expected


def test_matrix_spec_effective_prow_type() -> None:
    """The test prow_type overrides the matrix one."""
    matrix = MatrixSpec(name="m", prow_type="periodic")
    assert matrix.effective_prow_type(TestSpec()) == "periodic"
    assert matrix.effective_prow_type(TestSpec(prow_type="presubmit")) == "presubmit"


def test_matrices_spec_names_matrices() -> None:
    """Matrices without a name receive their configuration key."""
    spec = MatricesSpec.model_validate(
        {
            "version": "v1",
            "matrices": {
                "gpu-operator": {"description": "GPU"},
                "nfd": {"name": "Node Feature Discovery"},
            },
        }
    )
    assert spec.matrices["gpu-operator"].name == "gpu-operator"
    assert spec.matrices["nfd"].name == "Node Feature Discovery"
    assert spec.test_history == -1


def test_matrices_spec_names_matrix_instances() -> None:
    """Matrix instances without a name also receive their key."""
    spec = MatricesSpec(version="v1", matrices={"m": MatrixSpec()})
    assert spec.matrices["m"].name == "m"


def test_matrices_spec_requires_version() -> None:
    """MatricesSpec requires a version."""
    with pytest.raises(ValidationError) as exc_info:
        MatricesSpec.model_validate({"matrices": {}})
    assert "version" in str(exc_info.value)


def test_matrix_spec_tests_are_ordered() -> None:
    """Tests of a group keep their configuration order."""
    matrix = MatrixSpec.model_validate(
        {
            "tests": {
                "01|group": [{"test_name": "b"}, {"test_name": "a"}],
            }
        }
    )
    assert [t.test_name for t in matrix.tests["01|group"]] == ["b", "a"]


def test_test_spec_holds_history() -> None:
    """A populated TestSpec holds its runs, excluded from serialization."""
    test = TestSpec(test_name="e2e")
    result = TestResult(build_id="1", passed=True, test_spec=test)
    populated = test.model_copy(update={"old_tests": (result,)})

    assert populated.old_tests[0].test_spec == test
    assert "old_tests" not in populated.model_dump()
