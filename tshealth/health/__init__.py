"""File health scoring for TypeScript/JavaScript sources.

Each file is parsed, measured and placed in the project import graph, then
classified into a health tier from excellent to critical.

Example:
    >>> from tshealth.health import FileAnalyzer
    >>> analyzer = FileAnalyzer()
    >>> record = analyzer.analyze(Path("src/app.ts"), project_root=Path("."))
    >>> print(record.health_level.value)
    excellent
"""

from tshealth.health.analyzer import FileAnalyzer
from tshealth.health.metrics.dependencies import (
    DependencyGraphBuilder,
    DependencyGraphCache,
    profile_file,
)
from tshealth.health.models import (
    AnalysisMode,
    AnalysisRecord,
    DependencyGraph,
    DependencyProfile,
    FileMetrics,
    FileOutcome,
    HealthIndexEntry,
    HealthLevel,
    RunSummary,
)
from tshealth.health.persistence import (
    HEALTH_INDEX_FILES,
    iter_analysis_records,
    load_health_index,
    rebuild_health_index,
    save_result,
    update_health_index,
)
from tshealth.health.report import (
    generate_html_report,
    generate_json_report,
    save_html_report,
    save_json_report,
)
from tshealth.health.runner import AnalysisRunner
from tshealth.health.scorer import calculate_health_level, calculate_health_points

__all__ = [
    # Orchestration
    "AnalysisRunner",
    "FileAnalyzer",
    # Dependency graph
    "DependencyGraphBuilder",
    "DependencyGraphCache",
    "profile_file",
    # Models
    "AnalysisMode",
    "AnalysisRecord",
    "DependencyGraph",
    "DependencyProfile",
    "FileMetrics",
    "FileOutcome",
    "HealthIndexEntry",
    "HealthLevel",
    "RunSummary",
    # Scoring
    "calculate_health_level",
    "calculate_health_points",
    # Persistence
    "HEALTH_INDEX_FILES",
    "iter_analysis_records",
    "load_health_index",
    "rebuild_health_index",
    "save_result",
    "update_health_index",
    # Report functions
    "generate_html_report",
    "generate_json_report",
    "save_html_report",
    "save_json_report",
]
