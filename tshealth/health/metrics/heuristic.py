"""Text-based metrics that need no syntax tree.

These numbers back every record: they are the sole result when structural
parsing fails, and they still supply maintainability, difficulty, effort and
line counts when it succeeds, so scores stay comparable across both paths.
"""

import logging
import math
import re

from tshealth.health.metrics import BaseSourceAnalyzer, HeuristicResult
from tshealth.health.models import FallbackFunctionRecord, FileMetrics, SourceUnit

logger = logging.getLogger(__name__)

FUNCTION_PATTERN = re.compile(
    r"(?:function\s+\w+"
    r"|const\s+\w+\s*=\s*\([^)]*\)\s*=>"
    r"|\w+\s*\([^)]*\)\s*{"
    r"|export\s+(?:default\s+)?function)",
    re.ASCII,
)
BRANCH_PATTERN = re.compile(r"\b(?:if|else|for|while|switch|case|catch)\b|&&|\|\|", re.ASCII)
COMMENT_PREFIXES = ("//", "/*", "*")


def estimate_maintainability(loc: int, complexity: int, function_count: int, nesting: int) -> float:
    """Linear-penalty maintainability estimate clamped to [0, 100]."""
    maintainability = 100.0
    if loc > 100:
        maintainability -= (loc - 100) * 0.1
    if complexity > 10:
        maintainability -= (complexity - 10) * 2
    if function_count > 10:
        maintainability -= (function_count - 10) * 1
    if nesting > 3:
        maintainability -= (nesting - 3) * 5
    return max(0.0, min(100.0, maintainability))


def max_brace_depth(lines: list[str]) -> int:
    """Running maximum of open-minus-close braces, line by line."""
    max_depth = 0
    depth = 0
    for line in lines:
        depth += line.count("{") - line.count("}")
        max_depth = max(max_depth, depth)
    return max_depth


class HeuristicAnalyzer(BaseSourceAnalyzer):
    """Line and regex scans over raw source text."""

    @property
    def name(self) -> str:
        return "heuristic"

    def analyze(self, unit: SourceUnit) -> HeuristicResult:
        """Compute text metrics for a source unit.

        Args:
            unit: The file to scan

        Returns:
            HeuristicResult with aggregate metrics and per-function estimates
        """
        return self.analyze_text(unit.text)

    def analyze_text(self, text: str) -> HeuristicResult:
        """Compute text metrics for raw source."""
        lines = text.split("\n")
        code_lines = [
            line
            for line in lines
            if line.strip() and not line.strip().startswith(COMMENT_PREFIXES)
        ]
        loc = len(code_lines)

        function_count = len(FUNCTION_PATTERN.findall(text))
        complexity = max(1, len(BRANCH_PATTERN.findall(text)))
        nesting = max_brace_depth(lines)

        maintainability = estimate_maintainability(loc, complexity, function_count, nesting)
        difficulty = max(1, complexity * 0.5 + function_count * 0.2)

        metrics = FileMetrics(
            maintainability=maintainability,
            complexity=complexity,
            difficulty=difficulty,
            effort=complexity * difficulty,
            loc=loc,
            total_lines=len(lines),
            max_nesting_depth=nesting,
            function_count=function_count,
        )

        functions = [
            FallbackFunctionRecord(
                name=f"function_{index}",
                complexity=max(1, complexity // function_count),
                difficulty=max(1, math.floor(difficulty / function_count)),
                effort=1,
                loc=loc // function_count,
            )
            for index in range(function_count)
        ]

        logger.debug(
            f"Heuristic scan: {loc} loc, complexity {complexity}, "
            f"{function_count} functions, nesting {nesting}"
        )
        return HeuristicResult(metrics=metrics, functions=functions)
