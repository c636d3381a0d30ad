"""Render the dashboard report with Jinja2 templates."""

import logging
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

from psap.ci_dashboard.report import MatrixReport

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = Path(__file__).parent / "templates" / "daily_matrix.html.j2"
MARKDOWN_TEMPLATE = Path(__file__).parent / "templates" / "daily_matrix.md.j2"


def md_section(text: str) -> str:
    """Markdown section underline matching the length of ``text``."""
    return "=" * len(text)


def md_subsection(text: str) -> str:
    """Markdown subsection underline matching the length of ``text``."""
    return "-" * len(text)


def create_environment(template_dir: Path) -> Environment:
    """Jinja2 environment loading templates from ``template_dir``."""
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(
            ["html", "htm", "xml", "html.j2", "htm.j2", "xml.j2"]
        ),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["md_section"] = md_section
    env.filters["md_subsection"] = md_subsection
    return env


def render_report(report: MatrixReport, template_path: Path | None = None) -> str:
    """Render the report into a page.

    Args:
        report: Resolved dashboard data
        template_path: Template file, the packaged HTML template by default

    Returns:
        The rendered page

    Raises:
        FileNotFoundError: If the template file doesn't exist
        ValueError: If the template cannot be parsed or applied

    """
    template_path = template_path or DEFAULT_TEMPLATE
    if not template_path.exists():
        raise FileNotFoundError(f"Template file not found: {template_path}")

    logger.info(f"Rendering report with template {template_path}")
    env = create_environment(template_path.parent)
    try:
        template = env.get_template(template_path.name)
        return template.render(report=report)
    except TemplateError as e:
        raise ValueError(f"Template {template_path} could not be applied: {e}") from e
