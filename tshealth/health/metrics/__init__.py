"""Base class and result types for per-file source analyzers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from tshealth.health.models import (
    ClassRecord,
    ExportRecord,
    FallbackFunctionRecord,
    FileMetrics,
    FunctionRecord,
    ImportRecord,
    InterfaceRecord,
    SourceUnit,
    TypeAliasRecord,
)


@dataclass
class StructuralResult:
    """Records extracted from a successfully parsed syntax tree."""

    functions: list[FunctionRecord] = field(default_factory=list)
    classes: list[ClassRecord] = field(default_factory=list)
    interfaces: list[InterfaceRecord] = field(default_factory=list)
    types: list[TypeAliasRecord] = field(default_factory=list)
    imports: list[ImportRecord] = field(default_factory=list)
    exports: list[ExportRecord] = field(default_factory=list)
    tree: Any = None

    @property
    def total_complexity(self) -> int:
        """Base path plus the complexity of every recorded function."""
        return 1 + sum(fn.complexity for fn in self.functions)


@dataclass
class FallbackResult:
    """Marker returned when a file cannot be parsed structurally."""

    reason: str


@dataclass
class HeuristicResult:
    """Text-scan metrics, available for every file."""

    metrics: FileMetrics
    functions: list[FallbackFunctionRecord] = field(default_factory=list)


class BaseSourceAnalyzer(ABC):
    """Abstract base class for analyzers that inspect one source unit."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short analyzer name used in log messages."""
        ...

    @abstractmethod
    def analyze(self, unit: SourceUnit) -> Any:
        """Analyze one source unit.

        Args:
            unit: The file to analyze

        Returns:
            Analyzer-specific result
        """
        ...
