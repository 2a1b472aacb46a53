"""CLI commands that read and maintain the health indexes."""

from pathlib import Path

import click
from rich.table import Table

from tshealth.cli.output import configure_logging, console, get_level_style
from tshealth.health.models import HealthIndexEntry, HealthLevel
from tshealth.health.persistence import load_health_index, rebuild_health_index
from tshealth.utils.config import get_settings

LEVEL_CHOICES = [level.value for level in HealthLevel]


@click.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False),
    help="Directory holding the health indexes (default: reports)",
)
@click.option(
    "--level",
    "-l",
    "levels",
    type=click.Choice(LEVEL_CHOICES),
    multiple=True,
    help="Tier(s) to include (default: poor and critical)",
)
@click.option(
    "--limit",
    "-n",
    type=click.IntRange(min=1),
    default=10,
    show_default=True,
    help="Maximum number of files to show",
)
def worst(output: str | None, levels: tuple[str, ...], limit: int) -> None:
    """List the most complex files of the weakest tiers.

    \b
    Examples:
        tshealth worst                       # Poor and critical files
        tshealth worst --level fair -n 20
    """
    output_dir = Path(output) if output else get_settings().output_dir
    selected = (
        [HealthLevel(value) for value in levels]
        if levels
        else [HealthLevel.CRITICAL, HealthLevel.POOR]
    )

    rows: list[tuple[HealthLevel, HealthIndexEntry]] = []
    for level in selected:
        rows.extend((level, entry) for entry in load_health_index(output_dir, level))

    if not rows:
        tiers = ", ".join(level.value for level in selected)
        console.print(f"[green]No indexed files in tier(s): {tiers}[/]")
        return

    # Worst tier first, then most complex
    rows.sort(key=lambda row: (-row[0].rank, -row[1].complexity))

    table = Table(title="Worst Offenders", show_header=True)
    table.add_column("File", style="cyan")
    table.add_column("Tier")
    table.add_column("Complexity", justify="right")
    table.add_column("Maintainability", justify="right")
    table.add_column("Functions", justify="right")
    table.add_column("LOC", justify="right", style="dim")

    for level, entry in rows[:limit]:
        table.add_row(
            entry.file_path,
            f"[{get_level_style(level)}]{level.value}[/]",
            str(entry.complexity),
            f"{entry.maintainability:.1f}",
            str(entry.function_count),
            str(entry.loc),
        )

    console.print(table)
    if len(rows) > limit:
        console.print(f"  ... and {len(rows) - limit} more")


@click.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(exists=True, file_okay=False),
    help="Directory holding the analysis records (default: reports)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def reindex(output: str | None, verbose: bool) -> None:
    """Rebuild all health indexes from the stored analysis records.

    Removes stale entries left behind when a re-analyzed file moved to a
    different tier.
    """
    configure_logging(verbose)
    output_dir = Path(output) if output else get_settings().output_dir

    counts = rebuild_health_index(output_dir)

    for level, count in counts.items():
        console.print(f"  {level.emoji} [{get_level_style(level)}]{level.value}[/]: {count}")
    console.print(f"[green]Rebuilt health indexes in[/] {output_dir}")
