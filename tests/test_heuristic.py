"""Tests for the text heuristics."""

from pathlib import Path

import pytest

from tshealth.health.metrics.heuristic import (
    HeuristicAnalyzer,
    estimate_maintainability,
    max_brace_depth,
)
from tshealth.health.models import SourceUnit


@pytest.fixture
def heuristic() -> HeuristicAnalyzer:
    return HeuristicAnalyzer()


class TestLineCounts:
    """Tests for LOC and total line counting."""

    def test_blank_and_comment_lines_excluded(self, heuristic: HeuristicAnalyzer) -> None:
        """Test that comments and blank lines do not count as code."""
        text = "// line comment\n/* block */\n * doc line\n\nrun();\n"
        metrics = heuristic.analyze_text(text).metrics
        assert metrics.loc == 1
        assert metrics.total_lines == 6

    def test_plain_statements(self, heuristic: HeuristicAnalyzer) -> None:
        """Test a branch-free file."""
        result = heuristic.analyze_text("const a = 1;\nconst b = 2;\n")
        metrics = result.metrics
        assert metrics.loc == 2
        assert metrics.total_lines == 3
        assert metrics.function_count == 0
        assert metrics.complexity == 1
        assert metrics.max_nesting_depth == 0
        assert metrics.maintainability == 100.0
        assert metrics.difficulty == 1
        assert metrics.effort == 1
        assert result.functions == []


class TestComplexity:
    """Tests for branch counting."""

    def test_keywords_and_logical_operators(self, heuristic: HeuristicAnalyzer) -> None:
        """Test that if, else, && and || each add one."""
        text = "if (a && b || c) { x(); } else { y(); }\n"
        assert heuristic.analyze_text(text).metrics.complexity == 4

    def test_keywords_inside_identifiers_ignored(self, heuristic: HeuristicAnalyzer) -> None:
        """Test that word boundaries keep 'elsewhere' or 'format' from counting."""
        text = "const elsewhere = 1;\nconst format = 2;\nconst cases = 3;\n"
        assert heuristic.analyze_text(text).metrics.complexity == 1

    def test_loops_switch_and_catch(self, heuristic: HeuristicAnalyzer) -> None:
        """Test loop, switch, case and catch keywords."""
        text = (
            "for (;;) {}\nwhile (x) {}\nswitch (y) {\ncase 1: break;\ncase 2: break;\n}\n"
            "try {} catch (e) {}\n"
        )
        assert heuristic.analyze_text(text).metrics.complexity == 6


class TestNesting:
    """Tests for brace depth tracking."""

    @pytest.mark.parametrize(
        "lines,expected",
        [
            ([], 0),
            (["{}"], 0),
            (["{", "{", "}", "}"], 2),
            (["{ {", "}", "{", "}", "}"], 2),
            (["}", "{"], 0),
        ],
    )
    def test_max_brace_depth(self, lines: list[str], expected: int) -> None:
        """Test running maximum of open minus close braces."""
        assert max_brace_depth(lines) == expected


class TestMaintainability:
    """Tests for the maintainability estimate."""

    def test_no_penalties(self) -> None:
        """Test small files keep the full score."""
        assert estimate_maintainability(100, 10, 10, 3) == 100.0

    def test_all_penalties(self) -> None:
        """Test each penalty applies above its threshold."""
        # 100 - 10 (loc) - 10 (complexity) - 2 (functions) - 10 (nesting)
        assert estimate_maintainability(200, 15, 12, 5) == pytest.approx(68.0)

    def test_clamped_at_zero(self) -> None:
        """Test the score never goes negative."""
        assert estimate_maintainability(2000, 100, 50, 20) == 0.0


class TestFallbackFunctions:
    """Tests for per-function rows of the heuristic path."""

    def test_rows_split_aggregate(self, heuristic: HeuristicAnalyzer) -> None:
        """Test each detected function gets an equal share."""
        result = heuristic.analyze_text("function a() {}\nfunction b() {}\n")
        assert [fn.name for fn in result.functions] == ["function_0", "function_1"]
        for fn in result.functions:
            assert fn.complexity == 1
            assert fn.difficulty == 1
            assert fn.effort == 1
            assert fn.loc == 1

    def test_to_dict(self, heuristic: HeuristicAnalyzer) -> None:
        """Test fallback rows serialize their five fields."""
        row = heuristic.analyze_text("function a() {}\n").functions[0]
        assert row.to_dict() == {
            "name": "function_0",
            "complexity": 1,
            "difficulty": 1,
            "effort": 1,
            "loc": 1,
        }

    def test_analyze_unit(self, heuristic: HeuristicAnalyzer, tmp_path: Path) -> None:
        """Test analyzing a SourceUnit uses its text."""
        unit = SourceUnit(path=tmp_path / "a.ts", relative_path="a.ts", text="if (x) {}\n")
        assert heuristic.analyze(unit).metrics.complexity == 1
