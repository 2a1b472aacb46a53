"""Main CLI entry point for tshealth."""

import click

from tshealth import __version__
from tshealth.cli.commands.analyze import analyze
from tshealth.cli.commands.index import reindex, worst


@click.group()
@click.version_option(version=__version__, prog_name="tshealth")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """tshealth - health scores for TypeScript and JavaScript files.

    Classifies every file as excellent, good, fair, poor or critical from its
    complexity, maintainability and place in the import graph.

    \b
    Examples:
        tshealth analyze src
        tshealth analyze src/app.ts --base .
        tshealth worst --level critical
    """
    ctx.ensure_object(dict)


# Register commands
cli.add_command(analyze)
cli.add_command(worst)
cli.add_command(reindex)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
