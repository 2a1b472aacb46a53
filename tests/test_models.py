"""Tests for record models, run summaries and reports."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from tshealth.health.models import (
    AnalysisRecord,
    FallbackFunctionRecord,
    FileOutcome,
    FunctionRecord,
    HealthIndexEntry,
    HealthLevel,
    RunSummary,
    SourceUnit,
)
from tshealth.health.report import generate_html_report, generate_json_report

RecordFactory = Callable[..., AnalysisRecord]


def _summary(tmp_path: Path) -> RunSummary:
    return RunSummary(
        target=tmp_path,
        output_dir=tmp_path / "reports",
        outcomes=[
            FileOutcome("src/a.ts", HealthLevel.EXCELLENT, maintainability=100.0, complexity=2),
            FileOutcome("src/b.ts", HealthLevel.POOR, maintainability=40.0, complexity=14),
            FileOutcome("src/c.js", HealthLevel.EXCELLENT, maintainability=90.0, complexity=5),
            FileOutcome("src/d.ts", error="Could not read d.ts"),
        ],
    )


# ==============================================================================
# Health Levels
# ==============================================================================


class TestHealthLevel:
    """Tests for tier ordering and display."""

    def test_ordering(self) -> None:
        """Test ranks run from best to worst."""
        assert [level.rank for level in HealthLevel] == [0, 1, 2, 3, 4]
        assert HealthLevel.CRITICAL.is_at_or_below(HealthLevel.POOR)
        assert HealthLevel.POOR.is_at_or_below(HealthLevel.POOR)
        assert not HealthLevel.FAIR.is_at_or_below(HealthLevel.POOR)

    def test_colors_and_emojis(self) -> None:
        """Test every tier has display attributes."""
        assert HealthLevel.EXCELLENT.color == "green"
        assert HealthLevel.CRITICAL.color == "red"
        assert len({level.emoji for level in HealthLevel}) == 5

    @pytest.mark.parametrize(
        "name,dialect",
        [("a.ts", "typescript"), ("a.tsx", "tsx"), ("a.js", "tsx"), ("a.jsx", "tsx")],
    )
    def test_source_unit_dialect(self, name: str, dialect: str) -> None:
        """Test grammar choice by extension."""
        assert SourceUnit(path=Path(name), relative_path=name, text="").dialect == dialect


# ==============================================================================
# Analysis Records
# ==============================================================================


class TestAnalysisRecord:
    """Tests for record statistics and serialization."""

    def test_stats_without_functions(self, make_record: RecordFactory) -> None:
        """Test empty function lists give zero averages."""
        stats = make_record().stats
        assert stats["functionCount"] == 0
        assert stats["averageFunctionComplexity"] == 0
        assert stats["mostComplexFunction"] is None
        assert stats["hasCircularDependencies"] is False

    def test_function_statistics(self, make_record: RecordFactory) -> None:
        """Test the average is rounded and the first maximum wins."""
        record = make_record()
        record.functions = [
            FunctionRecord(name="a", complexity=2),
            FunctionRecord(name="b", complexity=5),
            FunctionRecord(name="c", complexity=5),
        ]
        assert record.average_function_complexity == 4.0
        assert record.most_complex_function is not None
        assert record.most_complex_function.name == "b"

        record.functions.append(FunctionRecord(name="d", complexity=1))
        assert record.average_function_complexity == 3.25

        record.functions = [FunctionRecord(name="x", complexity=1)] * 2 + [
            FunctionRecord(name="y", complexity=2)
        ]
        assert record.average_function_complexity == 1.33

    def test_fallback_rows_in_stats(self, make_record: RecordFactory) -> None:
        """Test heuristic function rows serialize in the stats."""
        record = make_record()
        record.functions = [FallbackFunctionRecord("function_0", 3, 2, 1, 10)]
        assert record.stats["mostComplexFunction"] == {
            "name": "function_0",
            "complexity": 3,
            "difficulty": 2,
            "effort": 1,
            "loc": 10,
        }

    def test_to_dict_is_json_serializable(self, make_record: RecordFactory) -> None:
        """Test a record converts to plain JSON types."""
        data = json.loads(json.dumps(make_record().to_dict()))
        assert data["filePath"] == "/project/src/app.ts"
        assert data["healthLevel"] == "good"
        assert set(data["analysis"]) >= {
            "analysisMode",
            "maintainability",
            "complexity",
            "difficulty",
            "effort",
            "loc",
            "totalLines",
            "maxNestingDepth",
            "functions",
            "dependencies",
            "stats",
        }

    def test_index_entry_round_trip(self, make_record: RecordFactory) -> None:
        """Test entries read back with the values they were written with."""
        entry = HealthIndexEntry.from_record(make_record(complexity=7))
        restored = HealthIndexEntry.from_dict(entry.to_dict())
        assert restored == entry


# ==============================================================================
# Run Summary
# ==============================================================================


class TestRunSummary:
    """Tests for run-level aggregation."""

    def test_counts(self, tmp_path: Path) -> None:
        """Test totals only count successful outcomes."""
        summary = _summary(tmp_path)
        assert summary.total == 3
        assert summary.errors == 1
        assert summary.distribution[HealthLevel.EXCELLENT] == 2
        assert summary.distribution[HealthLevel.POOR] == 1
        assert summary.distribution[HealthLevel.CRITICAL] == 0
        assert summary.percentage(HealthLevel.EXCELLENT) == pytest.approx(66.667, rel=1e-3)

    def test_averages(self, tmp_path: Path) -> None:
        """Test averages over successful outcomes, rounded to two places."""
        summary = _summary(tmp_path)
        assert summary.average_complexity == 7.0
        assert summary.average_maintainability == 76.67

    def test_recommendations(self, tmp_path: Path) -> None:
        """Test complex and hard-to-maintain files get recommendations."""
        recs = _summary(tmp_path).recommendations
        assert [(r["type"], r["filePath"]) for r in recs] == [
            ("high_complexity", "src/b.ts"),
            ("low_maintainability", "src/b.ts"),
        ]

    def test_empty_summary(self, tmp_path: Path) -> None:
        """Test an empty run has zero averages and percentages."""
        summary = RunSummary(target=tmp_path, output_dir=tmp_path)
        assert summary.average_complexity == 0
        assert summary.percentage(HealthLevel.GOOD) == 0.0


# ==============================================================================
# Reports
# ==============================================================================


class TestReportGeneration:
    """Tests for report generation."""

    def test_generate_json_report(self, tmp_path: Path) -> None:
        """Test JSON report generation."""
        data = json.loads(generate_json_report(_summary(tmp_path)))

        assert data["total"] == 3
        assert data["errors"] == 1
        assert data["distribution"] == {
            "excellent": 2,
            "good": 0,
            "fair": 0,
            "poor": 1,
            "critical": 0,
        }
        assert len(data["files"]) == 4
        assert data["files"][3]["success"] is False

    def test_compact_json_report(self, tmp_path: Path) -> None:
        """Test the non-pretty JSON form."""
        assert "\n" not in generate_json_report(_summary(tmp_path), pretty=False)

    def test_generate_html_report(self, tmp_path: Path) -> None:
        """Test HTML report generation."""
        html_str = generate_html_report(_summary(tmp_path))

        assert "<!DOCTYPE html>" in html_str
        assert "Health Distribution" in html_str
        assert "src/b.ts" in html_str
        assert "Errors (1)" in html_str
        assert "Could not read d.ts" in html_str
        # Worst file first
        assert html_str.index("src/b.ts") < html_str.index("src/a.ts")

    def test_html_escapes_paths(self, tmp_path: Path) -> None:
        """Test file paths are HTML-escaped."""
        summary = RunSummary(
            target=tmp_path,
            output_dir=tmp_path,
            outcomes=[FileOutcome("<script>.ts", HealthLevel.GOOD, maintainability=80, complexity=3)],
        )
        html_str = generate_html_report(summary)
        assert "&lt;script&gt;.ts" in html_str
        assert "<script>.ts" not in html_str
