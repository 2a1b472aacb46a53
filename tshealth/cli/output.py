"""Console output and logging setup shared by CLI commands."""

import logging

from rich.console import Console

from tshealth.health.models import HealthLevel

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr; debug detail when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


def get_level_style(level: HealthLevel) -> str:
    """Get Rich style for a health tier."""
    return f"bold {level.color}"
