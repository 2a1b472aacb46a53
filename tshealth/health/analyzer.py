"""Single-file analysis orchestrator."""

import logging
from pathlib import Path

from tshealth.exceptions import SourceReadError
from tshealth.health.metrics import FallbackResult, HeuristicResult
from tshealth.health.metrics.dependencies import DependencyGraphCache, profile_file
from tshealth.health.metrics.heuristic import HeuristicAnalyzer
from tshealth.health.metrics.structural import StructuralAnalyzer
from tshealth.health.models import AnalysisMode, AnalysisRecord, FileMetrics, SourceUnit
from tshealth.health.scorer import calculate_health_level
from tshealth.utils.path_safety import to_posix_relative

logger = logging.getLogger(__name__)

FALLBACK_NOTE = "Fallback to simple analysis - TypeScript parsing failed"


class FileAnalyzer:
    """Combines structural, heuristic and dependency analysis of one file."""

    def __init__(
        self,
        graph_cache: DependencyGraphCache | None = None,
        nested_function_complexity: str = "include",
    ) -> None:
        """Initialize the analyzer.

        Args:
            graph_cache: Shared graph cache; a private one is created if omitted
            nested_function_complexity: ``"include"`` or ``"exclude"``, see
                :class:`StructuralAnalyzer`
        """
        self.graph_cache = graph_cache or DependencyGraphCache()
        self.heuristic = HeuristicAnalyzer()
        self.structural = StructuralAnalyzer(nested_function_complexity)

    def read_source(self, file_path: Path, project_root: Path) -> SourceUnit:
        """Read a source file.

        Raises:
            SourceReadError: If the file cannot be read or decoded
        """
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(file_path, str(e)) from e
        return SourceUnit(
            path=file_path,
            relative_path=to_posix_relative(file_path, project_root),
            text=text,
        )

    def analyze(self, file_path: Path, project_root: Path | None = None) -> AnalysisRecord:
        """Analyze one source file and classify its health.

        Args:
            file_path: The file to analyze
            project_root: Root of the project the file belongs to; defaults to
                the file's directory

        Returns:
            AnalysisRecord, structural when the file parses cleanly and a
            fallback record otherwise

        Raises:
            SourceReadError: If the file cannot be read
        """
        file_path = Path(file_path).resolve()
        root = Path(project_root).resolve() if project_root else file_path.parent

        unit = self.read_source(file_path, root)
        heuristic = self.heuristic.analyze(unit)
        result = self.structural.analyze(unit)

        if isinstance(result, FallbackResult):
            logger.warning(f"Using heuristic analysis for {unit.relative_path}: {result.reason}")
            return self._fallback_record(unit, heuristic)

        graph = self.graph_cache.get_or_build(root)
        profile = profile_file(file_path, root, graph)
        if profile.note:
            logger.debug(f"{unit.relative_path}: {profile.note}")

        base = heuristic.metrics
        metrics = FileMetrics(
            maintainability=base.maintainability,
            complexity=max(result.total_complexity, base.complexity),
            difficulty=base.difficulty,
            effort=base.effort,
            loc=base.loc,
            total_lines=base.total_lines,
            max_nesting_depth=base.max_nesting_depth,
            function_count=len(result.functions),
        )
        level = calculate_health_level(metrics, profile)
        logger.debug(f"{unit.relative_path}: {level.value} (complexity {metrics.complexity})")

        return AnalysisRecord(
            file_path=file_path.as_posix(),
            health_level=level,
            metrics=metrics,
            mode=AnalysisMode.STRUCTURAL,
            functions=list(result.functions),
            classes=result.classes,
            interfaces=result.interfaces,
            types=result.types,
            imports=result.imports,
            exports=result.exports,
            dependencies=profile,
        )

    def _fallback_record(self, unit: SourceUnit, heuristic: HeuristicResult) -> AnalysisRecord:
        return AnalysisRecord(
            file_path=unit.path.as_posix(),
            health_level=calculate_health_level(heuristic.metrics),
            metrics=heuristic.metrics,
            mode=AnalysisMode.FALLBACK,
            functions=list(heuristic.functions),
            note=FALLBACK_NOTE,
        )
