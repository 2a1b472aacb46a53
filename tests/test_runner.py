"""Tests for file and directory analysis runs."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from tshealth.health.models import HealthLevel
from tshealth.health.persistence import load_health_index
from tshealth.health.runner import AnalysisRunner, resolve_project_root
from tshealth.utils.config import AnalyzerSettings, ProjectConfig

ProjectFactory = Callable[[dict[str, str]], Path]


@pytest.fixture
def small_project(make_project: ProjectFactory, trivial_source: str) -> Path:
    """Three small files, one of which does not parse."""
    return make_project(
        {
            "src/config.ts": trivial_source,
            "src/App.tsx": (
                "import { config } from './config';\n"
                "export const App = () => <div>{config.name}</div>;\n"
            ),
            "src/broken.js": "const s = 'unterminated;\n",
            "node_modules/lib/index.js": "module.exports = {};\n",
        }
    )


class TestResolveProjectRoot:
    """Tests for choosing the project root of a run."""

    def test_base_dir_wins(self, tmp_path: Path) -> None:
        """Test an explicit base directory is used as is."""
        base = tmp_path / "base"
        assert resolve_project_root(tmp_path / "a.ts", base) == base.resolve()

    def test_directory_target(self, tmp_path: Path) -> None:
        """Test a directory target is its own root."""
        assert resolve_project_root(tmp_path) == tmp_path.resolve()

    def test_file_target(self, tmp_path: Path) -> None:
        """Test a file target uses its parent directory."""
        file_path = tmp_path / "a.ts"
        file_path.write_text("")
        assert resolve_project_root(file_path) == tmp_path.resolve()


class TestAnalysisRunner:
    """Tests for running analyses and persisting their results."""

    def test_directory_run(self, small_project: Path, tmp_path: Path) -> None:
        """Test every source file is analyzed, persisted and indexed."""
        output = tmp_path / "reports"
        summary = AnalysisRunner(output).run(small_project)

        assert [o.file_path for o in summary.outcomes] == [
            "src/App.tsx",
            "src/broken.js",
            "src/config.ts",
        ]
        assert summary.total == 3
        assert summary.errors == 0
        assert [o.fallback for o in summary.outcomes] == [False, True, False]

        config_record = output / "src" / "config.json"
        assert config_record.exists()
        data = json.loads(config_record.read_text())
        assert data["healthLevel"] == "excellent"
        assert data["analysis"]["dependencies"]["dependentCount"] == 1

        indexed = load_health_index(output, HealthLevel.EXCELLENT)
        assert data["filePath"] in [entry.file_path for entry in indexed]

    def test_reanalysis_keeps_one_entry(self, small_project: Path, tmp_path: Path) -> None:
        """Test running twice rewrites records without duplicating index entries."""
        output = tmp_path / "reports"
        runner = AnalysisRunner(output)
        runner.run(small_project)
        summary = runner.run(small_project)

        assert summary.total == 3
        entries = [
            entry.file_path
            for level in HealthLevel
            for entry in load_health_index(output, level)
        ]
        assert len(entries) == 3
        assert len(set(entries)) == 3

    def test_single_file_run(self, small_project: Path, tmp_path: Path) -> None:
        """Test a file target is analyzed against its directory."""
        output = tmp_path / "reports"
        summary = AnalysisRunner(output).run(small_project / "src" / "config.ts")

        assert [o.file_path for o in summary.outcomes] == ["config.ts"]
        assert (output / "config.json").exists()

    def test_base_dir_controls_mirroring(self, small_project: Path, tmp_path: Path) -> None:
        """Test records mirror paths relative to the given base directory."""
        output = tmp_path / "reports"
        summary = AnalysisRunner(output).run(small_project / "src", base_dir=small_project)

        assert summary.outcomes[0].file_path == "src/App.tsx"
        assert (output / "src" / "App.json").exists()

    def test_parallel_run_keeps_file_order(self, small_project: Path, tmp_path: Path) -> None:
        """Test worker threads produce the same ordered outcomes."""
        serial = AnalysisRunner(tmp_path / "serial").run(small_project)
        parallel = AnalysisRunner(tmp_path / "parallel", max_workers=4).run(small_project)

        assert [o.file_path for o in parallel.outcomes] == [o.file_path for o in serial.outcomes]
        assert [o.health_level for o in parallel.outcomes] == [
            o.health_level for o in serial.outcomes
        ]

    def test_unreadable_file_becomes_error_outcome(
        self, make_project: ProjectFactory, tmp_path: Path
    ) -> None:
        """Test one bad file does not abort the run."""
        root = make_project({"ok.ts": "export const a = 1;\n"})
        (root / "bad.ts").write_bytes(b"\xff\xfe\x00\x81")

        summary = AnalysisRunner(tmp_path / "reports").run(root)

        assert summary.total == 1
        assert summary.errors == 1
        (failure,) = summary.failures
        assert failure.file_path == "bad.ts"
        assert failure.error is not None
        assert failure.health_level is None

    def test_empty_directory(self, tmp_path: Path) -> None:
        """Test a directory without sources yields an empty summary."""
        (tmp_path / "empty").mkdir()
        summary = AnalysisRunner(tmp_path / "reports").run(tmp_path / "empty")
        assert summary.outcomes == []
        assert summary.total == 0

    def test_max_files(self, small_project: Path, tmp_path: Path) -> None:
        """Test the file cap limits the run."""
        summary = AnalysisRunner(tmp_path / "reports", max_files=2).run(small_project)
        assert len(summary.outcomes) == 2

    def test_from_settings(self, small_project: Path, tmp_path: Path) -> None:
        """Test settings and project options are wired into the runner."""
        settings = AnalyzerSettings(output_dir=tmp_path / "out", max_workers=2, max_files=5)
        project_config = ProjectConfig(extensions=[".ts"], nested_function_complexity="exclude")

        runner = AnalysisRunner.from_settings(settings, project_config)

        assert runner.output_dir == (tmp_path / "out").resolve()
        assert runner.max_workers == 2
        assert runner.max_files == 5
        assert runner.extensions == (".ts",)
        assert runner.analyzer.structural.include_nested is False

        summary = runner.run(small_project)
        assert [o.file_path for o in summary.outcomes] == ["src/config.ts"]

    def test_from_settings_overrides(self, tmp_path: Path) -> None:
        """Test explicit output and worker arguments override settings."""
        runner = AnalysisRunner.from_settings(
            AnalyzerSettings(), output_dir=tmp_path / "x", max_workers=3
        )
        assert runner.output_dir == (tmp_path / "x").resolve()
        assert runner.max_workers == 3
