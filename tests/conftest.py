"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from tshealth.health.analyzer import FileAnalyzer
from tshealth.health.metrics.dependencies import DependencyGraphCache
from tshealth.health.models import (
    AnalysisRecord,
    DependencyEdge,
    DependencyProfile,
    DependentRecord,
    FileMetrics,
    HealthLevel,
)
from tshealth.utils.config import get_settings

ProjectFactory = Callable[[dict[str, str]], Path]


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_project(tmp_path: Path) -> ProjectFactory:
    """Return a factory that writes a source tree and returns its root."""

    def factory(files: dict[str, str]) -> Path:
        project_dir = tmp_path / "project"
        project_dir.mkdir(exist_ok=True)
        for relative, content in files.items():
            path = project_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return project_dir

    return factory


@pytest.fixture
def analyzer() -> FileAnalyzer:
    """A file analyzer with its own graph cache."""
    return FileAnalyzer(graph_cache=DependencyGraphCache())


@pytest.fixture
def trivial_source() -> str:
    """Five short lines without branches, functions or imports."""
    return """const answer = 42;
const name = "tshealth";

export const config = { answer, name };
export default config;
"""


@pytest.fixture
def nested_conditions_source() -> str:
    """A function with fifteen nested if/&& conditions importing ./b."""
    lines = ["import { helper } from './b';", "", "export function check(a, b) {"]
    for depth in range(15):
        lines.append("  " * (depth + 1) + "if (a && b) {")
    lines.append("  " * 16 + "helper();")
    for depth in reversed(range(15)):
        lines.append("  " * (depth + 1) + "}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _metrics(
    maintainability: float = 0.0,
    complexity: int = 20,
    difficulty: float = 20.0,
    function_count: int = 10,
    loc: int = 10,
) -> FileMetrics:
    """Metrics that score zero points unless overridden."""
    return FileMetrics(
        maintainability=maintainability,
        complexity=complexity,
        difficulty=difficulty,
        effort=complexity * difficulty,
        loc=loc,
        total_lines=loc,
        max_nesting_depth=0,
        function_count=function_count,
    )


def _profile(
    dependencies: int = 0,
    dependents: int = 0,
    depth: int = 0,
    cycles: int = 0,
) -> DependencyProfile:
    """A dependency profile with the given counts."""
    return DependencyProfile(
        dependencies=[
            DependencyEdge(
                path=f"src/dep{i}.ts",
                absolute_path=f"/project/src/dep{i}.ts",
                exists=True,
                is_external=False,
                extension=".ts",
                type="internal",
            )
            for i in range(dependencies)
        ],
        dependents=[
            DependentRecord(path=f"src/user{i}.ts", absolute_path=f"/project/src/user{i}.ts")
            for i in range(dependents)
        ],
        circular_dependencies=[["src/a.ts", "src/b.ts"] for _ in range(cycles)],
        depth=depth,
    )


def _record(
    file_path: str = "/project/src/app.ts",
    level: HealthLevel = HealthLevel.GOOD,
    complexity: int = 5,
    maintainability: float = 80.0,
) -> AnalysisRecord:
    """A minimal structural analysis record."""
    return AnalysisRecord(
        file_path=file_path,
        health_level=level,
        metrics=_metrics(
            maintainability=maintainability,
            complexity=complexity,
            difficulty=3.0,
            function_count=2,
        ),
        dependencies=DependencyProfile(),
    )


@pytest.fixture
def make_metrics() -> Callable[..., FileMetrics]:
    """Factory for FileMetrics; see ``_metrics``."""
    return _metrics


@pytest.fixture
def make_profile() -> Callable[..., DependencyProfile]:
    """Factory for DependencyProfile; see ``_profile``."""
    return _profile


@pytest.fixture
def make_record() -> Callable[..., AnalysisRecord]:
    """Factory for AnalysisRecord; see ``_record``."""
    return _record
