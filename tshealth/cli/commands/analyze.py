"""CLI command for analyzing source file health."""

import sys
from pathlib import Path

import click
from rich.panel import Panel
from rich.table import Table

from tshealth.cli.output import configure_logging, console, get_level_style
from tshealth.exceptions import ConfigError
from tshealth.health.models import HealthLevel, RunSummary
from tshealth.health.persistence import index_path
from tshealth.health.report import generate_json_report, save_html_report, save_json_report
from tshealth.health.runner import AnalysisRunner, resolve_project_root
from tshealth.utils.config import ProjectConfig, get_settings

LEVEL_CHOICES = [level.value for level in HealthLevel]


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=True, dir_okay=True))
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False),
    help="Directory for analysis records and health indexes (default: reports)",
)
@click.option(
    "--base",
    "-b",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    help="Project root for path mirroring and the dependency graph",
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    help="Number of files analyzed in parallel",
)
@click.option(
    "--report",
    "-r",
    type=click.Choice(["json", "html"]),
    help="Generate a run report in the specified format",
)
@click.option(
    "--report-output",
    type=click.Path(dir_okay=False),
    help="Output file path for the report (default: health_report.<format>)",
)
@click.option(
    "--ci",
    is_flag=True,
    help="CI mode: exit with non-zero status if any file is at or below --fail-level",
)
@click.option(
    "--fail-level",
    type=click.Choice(LEVEL_CHOICES),
    default=HealthLevel.CRITICAL.value,
    show_default=True,
    help="Health tier that fails CI mode",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show debug logging and every recommendation",
)
def analyze(
    path: str,
    output: str | None,
    base: str | None,
    workers: int | None,
    report: str | None,
    report_output: str | None,
    ci: bool,
    fail_level: str,
    verbose: bool,
) -> None:
    """Analyze the health of TypeScript/JavaScript files.

    PATH is a single source file or a directory. Every file gets a JSON
    record under the output directory, and the tier indexes
    (excellent.json ... critical.json) are updated.

    \b
    Examples:
        tshealth analyze src                    # Analyze a directory
        tshealth analyze src/app.ts --base .    # One file within its project
        tshealth analyze src --report html      # Also write an HTML report
        tshealth analyze src --ci --fail-level poor

    """
    configure_logging(verbose)
    settings = get_settings()
    target = Path(path).resolve()
    project_root = resolve_project_root(target, Path(base) if base else None)

    try:
        project_config = ProjectConfig.from_project(project_root)
    except ConfigError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    runner = AnalysisRunner.from_settings(
        settings,
        project_config,
        output_dir=Path(output) if output else None,
        max_workers=workers,
    )

    with console.status("[bold blue]Analyzing source files..."):
        summary = runner.run(target, project_root)

    if not summary.outcomes:
        console.print(f"[yellow]No TypeScript/JavaScript files found in {target}[/]")
        return

    if report:
        output_path = Path(report_output) if report_output else Path(f"health_report.{report}")

        if report == "json":
            save_json_report(summary, output_path)
            console.print(f"[green]JSON report saved to:[/] {output_path}")
        elif report == "html":
            save_html_report(summary, output_path)
            console.print(f"[green]HTML report saved to:[/] {output_path}")

        # In CI mode with report, also output JSON to stdout
        if ci:
            console.print(generate_json_report(summary))
    else:
        _display_summary(summary, verbose)

    if ci:
        threshold = HealthLevel(fail_level)
        failing = [
            o
            for o in summary.successes
            if o.health_level is not None and o.health_level.is_at_or_below(threshold)
        ]
        if failing:
            console.print(
                f"\n[red]CI Check Failed:[/] {len(failing)} file(s) at or below '{threshold.value}'"
            )
            for outcome in failing[:10]:
                level = outcome.health_level.value if outcome.health_level else "?"
                console.print(f"  - {outcome.file_path} ({level})")
            sys.exit(1)
        else:
            console.print(f"\n[green]CI Check Passed:[/] no file at or below '{threshold.value}'")
            sys.exit(0)


def _display_summary(summary: RunSummary, verbose: bool) -> None:
    """Display the run summary in the terminal.

    Args:
        summary: Completed run summary
        verbose: Whether to show every recommendation and fallback file
    """
    console.print(
        Panel(
            f"Files analyzed: [bold]{summary.total}[/]   Errors: [bold]{summary.errors}[/]\n"
            f"Average complexity: {summary.average_complexity}   "
            f"Average maintainability: {summary.average_maintainability}",
            title="[bold]Source Health Summary[/]",
            subtitle=str(summary.target),
        )
    )

    table = Table(title="Health Distribution", show_header=True)
    table.add_column("Tier")
    table.add_column("Files", justify="right")
    table.add_column("Share", justify="right", style="dim")

    for level, count in summary.distribution.items():
        style = get_level_style(level)
        table.add_row(
            f"{level.emoji} [{style}]{level.value.title()}[/]",
            str(count),
            f"{summary.percentage(level):.1f}%",
        )

    console.print(table)

    recommendations = summary.recommendations
    if recommendations:
        shown = recommendations if verbose else recommendations[:5]
        console.print("\n[bold]Recommendations:[/]")
        for i, rec in enumerate(shown, 1):
            console.print(f"  {i}. {rec['filePath']}: {rec['message']}")
        if len(recommendations) > len(shown):
            console.print(f"  ... and {len(recommendations) - len(shown)} more")

    fallbacks = [o for o in summary.successes if o.fallback]
    if fallbacks:
        console.print(
            f"\n[yellow]{len(fallbacks)} file(s) could not be parsed and were scored heuristically[/]"
        )
        if verbose:
            for outcome in fallbacks:
                console.print(f"  - {outcome.file_path}")

    if summary.failures:
        console.print(f"\n[bold red]Errors:[/] {summary.errors} file(s) could not be analyzed")
        for outcome in summary.failures:
            console.print(f"  - {outcome.file_path}: {outcome.error}")

    console.print(f"\nReports saved to {summary.output_dir}/")
    index_names = ", ".join(index_path(summary.output_dir, level).name for level in HealthLevel)
    console.print(f"Health indexes: {index_names}")
