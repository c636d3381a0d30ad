"""Data models for matrices configuration and CI run results."""

from psap.ci_dashboard.models.matrix import (
    MatricesSpec,
    MatrixSpec,
    ProwType,
    TestSpec,
)
from psap.ci_dashboard.models.prow_config import ProwGCSConfig
from psap.ci_dashboard.models.test_result import (
    MessageType,
    TestResult,
    ToolboxStepResult,
)

__all__ = [
    "MatricesSpec",
    "MatrixSpec",
    "MessageType",
    "ProwGCSConfig",
    "ProwType",
    "TestResult",
    "TestSpec",
    "ToolboxStepResult",
]
