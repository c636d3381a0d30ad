"""Load and parse the matrices configuration from YAML."""

import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from psap.ci_dashboard.models.matrix import MatricesSpec

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


def load_matrices_config(config_file: str | Path) -> MatricesSpec:
    """Load the matrices configuration.

    Args:
        config_file: Path to the YAML configuration, ``-`` to read stdin

    Returns:
        Parsed configuration, with matrix names and trigger types defaulted

    Raises:
        FileNotFoundError: If the configuration file doesn't exist
        ValueError: If YAML is invalid or doesn't match schema

    """
    source = str(config_file)
    if source == STDIN_PATH:
        logger.info("Reading matrices configuration from stdin")
        content = sys.stdin.read()
    else:
        path = Path(config_file)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        logger.info(f"Reading matrices configuration from {path}")
        content = path.read_text()
        logger.debug(f"Read {len(content)} bytes from {path}")

    return parse_matrices_config(content, source)


def parse_matrices_config(content: str, source: str = "<string>") -> MatricesSpec:
    """Parse YAML content into a matrices configuration.

    Raises:
        ValueError: If YAML is invalid or doesn't match schema

    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {source}: {e}") from e

    if data is None:
        raise ValueError(f"Empty configuration: {source}")

    try:
        spec = MatricesSpec.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid matrices configuration in {source}: {e}") from e

    for name, matrix in spec.matrices.items():
        nb_tests = sum(len(tests) for tests in matrix.tests.values())
        logger.debug(
            f"Matrix '{name}': {nb_tests} tests, prow_type={matrix.prow_type}"
        )
    logger.info(f"Parsed {len(spec.matrices)} matrices from {source}")

    return spec
