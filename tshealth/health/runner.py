"""Directory and single-file analysis runs."""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from tshealth.health.analyzer import FileAnalyzer
from tshealth.health.metrics.dependencies import DependencyGraphBuilder, DependencyGraphCache
from tshealth.health.models import FileOutcome, RunSummary
from tshealth.health.persistence import save_result, update_health_index
from tshealth.utils.config import AnalyzerSettings, ProjectConfig
from tshealth.utils.files import DEFAULT_EXCLUDE_DIRS, SOURCE_EXTENSIONS, collect_source_files
from tshealth.utils.path_safety import to_posix_relative

logger = logging.getLogger(__name__)


def resolve_project_root(target: Path, base_dir: Path | None = None) -> Path:
    """Project root of a run: ``base_dir`` if given, else the target directory
    or the directory of a target file."""
    if base_dir is not None:
        return Path(base_dir).resolve()
    target = Path(target).resolve()
    return target if target.is_dir() else target.parent


class AnalysisRunner:
    """Analyzes every source file of a target and persists the results.

    Per-file failures never abort a run; they are logged and reported as
    failed outcomes in the returned :class:`RunSummary`.
    """

    def __init__(
        self,
        output_dir: Path,
        analyzer: FileAnalyzer | None = None,
        max_workers: int = 1,
        extensions: Iterable[str] = SOURCE_EXTENSIONS,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
        max_files: int = 0,
    ) -> None:
        self.output_dir = Path(output_dir).resolve()
        self.analyzer = analyzer or FileAnalyzer()
        self.max_workers = max(1, max_workers)
        self.extensions = tuple(extensions)
        self.exclude_dirs = frozenset(exclude_dirs)
        self.max_files = max_files

    @classmethod
    def from_settings(
        cls,
        settings: AnalyzerSettings,
        project_config: ProjectConfig | None = None,
        output_dir: Path | None = None,
        max_workers: int | None = None,
    ) -> "AnalysisRunner":
        """Create a runner from runtime settings and project options.

        Args:
            settings: Runtime settings
            project_config: Options read from the project's tshealth.toml
            output_dir: Overrides ``settings.output_dir``
            max_workers: Overrides ``settings.max_workers``
        """
        project_config = project_config or ProjectConfig()
        builder = DependencyGraphBuilder(project_config.extensions, project_config.exclude)
        cache = DependencyGraphCache(builder=builder, capacity=settings.graph_cache_size)
        analyzer = FileAnalyzer(
            graph_cache=cache,
            nested_function_complexity=(
                project_config.nested_function_complexity
                or settings.nested_function_complexity
            ),
        )
        return cls(
            output_dir=output_dir or settings.output_dir,
            analyzer=analyzer,
            max_workers=max_workers or settings.max_workers,
            extensions=project_config.extensions,
            exclude_dirs=project_config.exclude,
            max_files=settings.max_files,
        )

    def run(self, target: Path, base_dir: Path | None = None) -> RunSummary:
        """Analyze a file or every source file below a directory.

        Args:
            target: Source file or directory to analyze
            base_dir: Project root for path mirroring and the dependency
                graph; see :func:`resolve_project_root`

        Returns:
            RunSummary with one outcome per collected file
        """
        target = Path(target).resolve()
        project_root = resolve_project_root(target, base_dir)
        summary = RunSummary(target=target, output_dir=self.output_dir)

        files = collect_source_files(target, self.extensions, self.exclude_dirs, self.max_files)
        if not files:
            logger.warning(f"No source files found in {target}")
            return summary

        logger.info(f"Analyzing {len(files)} files under {project_root}")
        # Every file of the run shares this graph
        self.analyzer.graph_cache.get_or_build(project_root)

        if self.max_workers == 1 or len(files) == 1:
            summary.outcomes = [self.process_file(f, target, project_root) for f in files]
        else:
            summary.outcomes = self._run_parallel(files, target, project_root)

        logger.info(f"Analysis complete: {summary.total} files, {summary.errors} errors")
        return summary

    def _run_parallel(
        self, files: list[Path], source_root: Path, project_root: Path
    ) -> list[FileOutcome]:
        outcomes: list[FileOutcome | None] = [None] * len(files)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {
                executor.submit(self.process_file, file_path, source_root, project_root): i
                for i, file_path in enumerate(files)
            }
            for future in as_completed(future_to_index):
                outcomes[future_to_index[future]] = future.result()
        return [outcome for outcome in outcomes if outcome is not None]

    def process_file(self, file_path: Path, source_root: Path, project_root: Path) -> FileOutcome:
        """Analyze and persist one file, turning any failure into an outcome."""
        display_path = to_posix_relative(file_path, project_root)
        try:
            record = self.analyzer.analyze(file_path, project_root)
            report_path = save_result(record, source_root, self.output_dir, project_root)
            update_health_index(record, self.output_dir)
        except Exception as e:
            logger.warning(f"Error analyzing {display_path}: {e}")
            return FileOutcome(file_path=display_path, error=str(e))

        return FileOutcome(
            file_path=display_path,
            health_level=record.health_level,
            report_path=report_path,
            maintainability=record.metrics.maintainability,
            complexity=record.metrics.complexity,
            fallback=record.is_fallback,
        )
