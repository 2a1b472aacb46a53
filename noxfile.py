"""Nox sessions for linting, testing and checking the tshealth CLI."""

import nox

PACKAGE = "tshealth"
LOCATIONS = (PACKAGE, "tests", "noxfile.py")
PYTHON_VERSIONS = ["3.10", "3.11", "3.12", "3.13"]

nox.options.sessions = ["lint", "tests", "cli"]


@nox.session
def lint(session: nox.Session) -> None:
    """Check style and types without rewriting files (ruff, black, mypy)."""
    session.install("-e", ".[dev]")
    session.run("ruff", "check", *LOCATIONS)
    session.run("black", "--check", *LOCATIONS)
    session.run("mypy", PACKAGE)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the test suite, forwarding extra arguments to pytest."""
    session.install("-e", ".[test]")
    session.run("pytest", *session.posargs)


@nox.session
def coverage(session: nox.Session) -> None:
    """Run tests with a coverage floor on the tshealth package."""
    session.install("-e", ".[test]")
    session.run(
        "pytest",
        f"--cov={PACKAGE}",
        "--cov-report=term-missing",
        "--cov-fail-under=80",
    )


@nox.session
def cli(session: nox.Session) -> None:
    """Smoke-test the installed console script and its tree-sitter grammars."""
    session.install(".")
    session.run("tshealth", "--version")
    session.run("tshealth", "analyze", "--help", silent=True)
    tmp = session.create_tmp()
    source = f"{tmp}/sample.ts"
    with open(source, "w", encoding="utf-8") as handle:
        handle.write("export const add = (a: number, b: number): number => a + b;\n")
    session.run("tshealth", "analyze", source, "--output", f"{tmp}/reports")


@nox.session(name="format")
def format_code(session: nox.Session) -> None:
    """Rewrite sources with ruff's fixes and black."""
    session.install("-e", ".[dev]")
    session.run("ruff", "check", "--fix", *LOCATIONS)
    session.run("black", *LOCATIONS)
