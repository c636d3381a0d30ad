"""CLI entry point generating the daily test matrix."""

import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import typer
from pydantic import ValidationError

from psap.ci_dashboard.config_loader import load_matrices_config
from psap.ci_dashboard.links import LinkResolver
from psap.ci_dashboard.models.prow_config import ProwGCSConfig
from psap.ci_dashboard.populate import MatrixPopulator
from psap.ci_dashboard.providers.base import ResultsProvider
from psap.ci_dashboard.providers.prow import ProwGCSProvider
from psap.ci_dashboard.renderer import render_report
from psap.ci_dashboard.report import build_report

# Configure logging - force reconfiguration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s [%(filename)s:%(lineno)d] - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,  # Force reconfiguration even if already set up
)
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "examples/gpu-operator.yml"
DEFAULT_OUTPUT_FILE = "output/gpu-operator_daily-matrix.html"
GENERATION_DATE_FORMAT = "%Y-%m-%d %Hh%M"

app = typer.Typer()


def save_generated_page(page: str, output_file: Path) -> None:
    """Write the generated page, creating its directory.

    Raises:
        RuntimeError: If the page cannot be written

    """
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(page)
    except OSError as e:
        raise RuntimeError(f"Failed to write into output file {output_file}: {e}")


@app.command()
def main(
    config_file: str = typer.Option(
        DEFAULT_CONFIG_FILE,
        "--config-file",
        "-c",
        help="Configuration file of the test matrices, '-' for stdin",
        envvar="CI_DASHBOARD_DAILYMATRIX_CONFIG_FILE",
    ),
    output_file: Path = typer.Option(  # noqa: B008
        Path(DEFAULT_OUTPUT_FILE),
        "--output-file",
        "-o",
        help="Output file where the generated matrix will be stored",
        envvar="CI_DASHBOARD_DAILYMATRIX_OUTPUT_FILE",
    ),
    template: Path | None = typer.Option(  # noqa: B008
        None,
        "--template",
        "-t",
        help="Template file from which the matrix will be generated",
        envvar="CI_DASHBOARD_DAILYMATRIX_TEMPLATE_FILE",
    ),
    test_history: int | None = typer.Option(
        None,
        "--test-history",
        help="Number of runs to fetch per test, -1 for all (default: from config)",
        envvar="CI_DASHBOARD_DAILYMATRIX_TEST_HISTORY",
    ),
    provider_config: str = typer.Option(
        "{}", help="JSON configuration of the Prow GCS provider"
    ),
) -> None:
    """Generate a daily test matrix from Prow results."""
    logger.info("Daily matrix - Starting")
    logger.info(f"Config file: {config_file}")
    logger.info(f"Output file: {output_file}")

    try:
        spec = load_matrices_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error parsing config file: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    history = spec.test_history if test_history is None else test_history

    try:
        provider = _create_provider(provider_config)
    except ValueError as e:
        logger.error(f"Failed to create provider: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    populator = MatrixPopulator(provider)
    try:
        logger.info(f"Populating test matrices with history of {history} tests")
        spec = asyncio.run(populator.populate(spec, history))
    except Exception as e:
        logger.exception("Fetching the matrix results failed")
        typer.echo(f"Error fetching the matrix results: {e}", err=True)
        raise typer.Exit(code=1)

    generation_date = datetime.now().strftime(GENERATION_DATE_FORMAT)
    report = build_report(spec, generation_date, LinkResolver(logger))

    try:
        page = render_report(report, template)
        save_generated_page(page, output_file)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error(f"Error generating the matrix page: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(f"Daily test matrix saved into '{output_file}'")


def _create_provider(config_json: str) -> ResultsProvider:
    """Create the Prow provider from its JSON configuration."""
    try:
        config_dict = json.loads(config_json)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in provider-config: {e}")

    try:
        return ProwGCSProvider(ProwGCSConfig(**config_dict))
    except (TypeError, ValidationError) as e:
        raise ValueError(f"Invalid provider-config: {e}")


if __name__ == "__main__":  # pragma: no cover
    app()
