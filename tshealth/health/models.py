"""Data models for the file health analysis."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


class HealthLevel(Enum):
    """Ordinal health tier of a source file, best to worst."""

    EXCELLENT = "excellent"  # 8+ points
    GOOD = "good"  # 6-7
    FAIR = "fair"  # 4-5
    POOR = "poor"  # 2-3
    CRITICAL = "critical"  # Below 2

    @classmethod
    def from_points(cls, points: int) -> "HealthLevel":
        """Convert a health point total to a tier.

        Args:
            points: Additive score produced by the scorer

        Returns:
            Corresponding health tier
        """
        if points >= 8:
            return cls.EXCELLENT
        elif points >= 6:
            return cls.GOOD
        elif points >= 4:
            return cls.FAIR
        elif points >= 2:
            return cls.POOR
        else:
            return cls.CRITICAL

    @property
    def rank(self) -> int:
        """Position in the ordering, 0 being the best tier."""
        return list(HealthLevel).index(self)

    def is_at_or_below(self, other: "HealthLevel") -> bool:
        """Check whether this tier is as bad as or worse than ``other``."""
        return self.rank >= other.rank

    @property
    def color(self) -> str:
        """Get the display color for this tier."""
        colors = {
            HealthLevel.EXCELLENT: "green",
            HealthLevel.GOOD: "cyan",
            HealthLevel.FAIR: "yellow",
            HealthLevel.POOR: "orange1",
            HealthLevel.CRITICAL: "red",
        }
        return colors.get(self, "white")

    @property
    def emoji(self) -> str:
        """Get the emoji for this tier."""
        emojis = {
            HealthLevel.EXCELLENT: "🟢",
            HealthLevel.GOOD: "🔵",
            HealthLevel.FAIR: "🟡",
            HealthLevel.POOR: "🟠",
            HealthLevel.CRITICAL: "🔴",
        }
        return emojis.get(self, "⚪")


class AnalysisMode(Enum):
    """Which analysis path produced a record."""

    STRUCTURAL = "structural"
    FALLBACK = "fallback"


@dataclass
class SourceUnit:
    """One source file read for analysis."""

    path: Path
    relative_path: str
    text: str

    @property
    def dialect(self) -> str:
        """Grammar dialect: plain TypeScript for .ts, JSX-flavoured otherwise."""
        return "typescript" if self.path.suffix == ".ts" else "tsx"


@dataclass
class FileMetrics:
    """Aggregate metrics the scorer consumes."""

    maintainability: float
    complexity: int
    difficulty: float
    effort: float
    loc: int
    total_lines: int
    max_nesting_depth: int
    function_count: int


@dataclass
class ParameterRecord:
    """A function or method parameter."""

    name: str
    type: str = "any"
    optional: bool = False
    default_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "type": self.type,
            "optional": self.optional,
            "defaultValue": self.default_value,
        }


@dataclass
class FunctionRecord:
    """A function, method, arrow function or function expression."""

    name: str
    parameters: list[ParameterRecord] = field(default_factory=list)
    return_type: str = "unknown"
    is_async: bool = False
    is_exported: bool = False
    complexity: int = 1
    start_line: int = 0
    end_line: int = 0

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "returnType": self.return_type,
            "isAsync": self.is_async,
            "isExported": self.is_exported,
            "complexity": self.complexity,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "length": self.length,
        }


@dataclass
class FallbackFunctionRecord:
    """Per-function estimate produced by the text heuristics."""

    name: str
    complexity: int
    difficulty: int
    effort: int
    loc: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "complexity": self.complexity,
            "difficulty": self.difficulty,
            "effort": self.effort,
            "loc": self.loc,
        }


@dataclass
class PropertyRecord:
    """A class property declaration."""

    name: str
    type: str = "any"
    is_static: bool = False
    is_private: bool = False
    is_protected: bool = False
    is_readonly: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "type": self.type,
            "isStatic": self.is_static,
            "isPrivate": self.is_private,
            "isProtected": self.is_protected,
            "isReadonly": self.is_readonly,
        }


@dataclass
class HeritageClause:
    """An extends/implements clause and the type names it references."""

    types: list[str] = field(default_factory=list)
    kind: str | None = None  # "extends" / "implements"; None for interfaces

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        if self.kind is None:
            return {"types": list(self.types)}
        return {"type": self.kind, "types": list(self.types)}


@dataclass
class ClassRecord:
    """A class declaration with its members."""

    name: str
    is_exported: bool = False
    is_abstract: bool = False
    heritage: list[HeritageClause] = field(default_factory=list)
    methods: list[FunctionRecord] = field(default_factory=list)
    properties: list[PropertyRecord] = field(default_factory=list)
    start_line: int = 0
    end_line: int = 0

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "isExported": self.is_exported,
            "isAbstract": self.is_abstract,
            "heritage": [h.to_dict() for h in self.heritage],
            "methods": [m.to_dict() for m in self.methods],
            "properties": [p.to_dict() for p in self.properties],
            "startLine": self.start_line,
            "endLine": self.end_line,
            "length": self.length,
        }


@dataclass
class SignatureParameter:
    """A parameter of an interface method signature."""

    name: str
    type: str = "any"
    optional: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "optional": self.optional}


@dataclass
class PropertySignature:
    """A property member of an interface."""

    name: str
    type: str = "any"
    optional: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "optional": self.optional}


@dataclass
class MethodSignature:
    """A method member of an interface."""

    name: str
    parameters: list[SignatureParameter] = field(default_factory=list)
    return_type: str = "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "returnType": self.return_type,
        }


@dataclass
class InterfaceRecord:
    """An interface declaration."""

    name: str
    is_exported: bool = False
    heritage: list[HeritageClause] = field(default_factory=list)
    properties: list[PropertySignature] = field(default_factory=list)
    methods: list[MethodSignature] = field(default_factory=list)
    start_line: int = 0
    end_line: int = 0

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "isExported": self.is_exported,
            "heritage": [h.to_dict() for h in self.heritage],
            "properties": [p.to_dict() for p in self.properties],
            "methods": [m.to_dict() for m in self.methods],
            "startLine": self.start_line,
            "endLine": self.end_line,
            "length": self.length,
        }


@dataclass
class TypeAliasRecord:
    """A type alias declaration."""

    name: str
    type: str
    is_exported: bool = False
    start_line: int = 0
    end_line: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "type": self.type,
            "isExported": self.is_exported,
            "startLine": self.start_line,
            "endLine": self.end_line,
        }


@dataclass
class ImportBinding:
    """A single default, namespace or named binding."""

    type: str  # "default", "namespace" or "named"
    name: str
    alias: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "name": self.name, "alias": self.alias}


@dataclass
class ImportRecord:
    """One import statement."""

    module_specifier: str
    imports: list[ImportBinding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "moduleSpecifier": self.module_specifier,
            "imports": [b.to_dict() for b in self.imports],
        }


@dataclass
class ExportRecord:
    """An export clause, re-export or export assignment."""

    type: str  # "declaration" or "assignment"
    module_specifier: str | None = None
    exports: list[ImportBinding] = field(default_factory=list)
    is_default: bool = False
    expression: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        if self.type == "assignment":
            return {
                "type": self.type,
                "isDefault": self.is_default,
                "expression": self.expression,
            }
        return {
            "type": self.type,
            "moduleSpecifier": self.module_specifier,
            "exports": [b.to_dict() for b in self.exports],
        }


@dataclass
class DependencyEdge:
    """An outgoing module dependency of a file."""

    path: str
    absolute_path: str | None
    exists: bool
    is_external: bool
    extension: str
    type: str  # relative, internal-alias, internal, external or absolute

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "absolutePath": self.absolute_path,
            "exists": self.exists,
            "isExternal": self.is_external,
            "extension": self.extension,
            "type": self.type,
        }


@dataclass
class DependentRecord:
    """A file that depends on the profiled file."""

    path: str
    absolute_path: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "absolutePath": self.absolute_path}


@dataclass
class DependencyProfile:
    """Position of one file in the project import graph."""

    dependencies: list[DependencyEdge] = field(default_factory=list)
    dependents: list[DependentRecord] = field(default_factory=list)
    circular_dependencies: list[list[str]] = field(default_factory=list)
    depth: int = 0
    note: str | None = None
    error: str | None = None

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)

    @property
    def dependent_count(self) -> int:
        return len(self.dependents)

    @property
    def has_circular_dependencies(self) -> bool:
        return len(self.circular_dependencies) > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "dependencies": [d.to_dict() for d in self.dependencies],
            "dependents": [d.to_dict() for d in self.dependents],
            "circularDependencies": [list(c) for c in self.circular_dependencies],
            "dependencyCount": self.dependency_count,
            "dependentCount": self.dependent_count,
            "depth": self.depth,
            "hasCircularDependencies": self.has_circular_dependencies,
            "note": self.note,
            "error": self.error,
        }


@dataclass
class DependencyGraph:
    """Whole-project module graph keyed by root-relative POSIX paths."""

    project_root: Path
    edges: dict[str, list[str]] = field(default_factory=dict)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.edges

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "projectRoot": str(self.project_root),
            "edges": {k: list(v) for k, v in self.edges.items()},
            "cycles": [list(c) for c in self.cycles],
        }


@dataclass
class AnalysisRecord:
    """Complete analysis of one source file, the unit of persistence."""

    file_path: str
    health_level: HealthLevel
    metrics: FileMetrics
    mode: AnalysisMode = AnalysisMode.STRUCTURAL
    functions: list[FunctionRecord | FallbackFunctionRecord] = field(default_factory=list)
    classes: list[ClassRecord] = field(default_factory=list)
    interfaces: list[InterfaceRecord] = field(default_factory=list)
    types: list[TypeAliasRecord] = field(default_factory=list)
    imports: list[ImportRecord] = field(default_factory=list)
    exports: list[ExportRecord] = field(default_factory=list)
    dependencies: DependencyProfile | None = None
    note: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.mode is AnalysisMode.FALLBACK

    @property
    def average_function_complexity(self) -> float:
        """Mean complexity over all recorded functions, rounded to 2 places."""
        if not self.functions:
            return 0
        return round(sum(fn.complexity for fn in self.functions) / len(self.functions), 2)

    @property
    def most_complex_function(self) -> FunctionRecord | FallbackFunctionRecord | None:
        """The first function with the highest complexity."""
        if not self.functions:
            return None
        return max(self.functions, key=lambda fn: fn.complexity)

    @property
    def stats(self) -> dict[str, Any]:
        """Derived counts and dependency statistics."""
        profile = self.dependencies or DependencyProfile()
        most_complex = self.most_complex_function
        return {
            "functionCount": len(self.functions),
            "classCount": len(self.classes),
            "interfaceCount": len(self.interfaces),
            "typeCount": len(self.types),
            "importCount": len(self.imports),
            "exportCount": len(self.exports),
            "dependencyCount": profile.dependency_count,
            "dependentCount": profile.dependent_count,
            "dependencyDepth": profile.depth,
            "hasCircularDependencies": profile.has_circular_dependencies,
            "averageFunctionComplexity": self.average_function_complexity,
            "mostComplexFunction": most_complex.to_dict() if most_complex else None,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "filePath": self.file_path,
            "healthLevel": self.health_level.value,
            "analysis": {
                "analysisMode": self.mode.value,
                "note": self.note,
                "maintainability": self.metrics.maintainability,
                "complexity": self.metrics.complexity,
                "difficulty": self.metrics.difficulty,
                "effort": self.metrics.effort,
                "loc": self.metrics.loc,
                "totalLines": self.metrics.total_lines,
                "maxNestingDepth": self.metrics.max_nesting_depth,
                "functions": [fn.to_dict() for fn in self.functions],
                "classes": [c.to_dict() for c in self.classes],
                "interfaces": [i.to_dict() for i in self.interfaces],
                "types": [t.to_dict() for t in self.types],
                "imports": [i.to_dict() for i in self.imports],
                "exports": [e.to_dict() for e in self.exports],
                "dependencies": self.dependencies.to_dict() if self.dependencies else None,
                "stats": self.stats,
            },
        }


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class HealthIndexEntry:
    """Lightweight rollup of a record, stored in its tier's index file."""

    file_path: str
    maintainability: float
    complexity: int
    difficulty: float
    loc: int
    function_count: int
    analyzed_at: str = field(default_factory=_utc_timestamp)

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> "HealthIndexEntry":
        """Build an index entry from a freshly produced record."""
        return cls(
            file_path=record.file_path,
            maintainability=record.metrics.maintainability,
            complexity=record.metrics.complexity,
            difficulty=record.metrics.difficulty,
            loc=record.metrics.loc,
            function_count=len(record.functions),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HealthIndexEntry":
        """Rebuild an entry read back from an index file."""
        return cls(
            file_path=data["filePath"],
            maintainability=data.get("maintainability", 0),
            complexity=data.get("complexity", 0),
            difficulty=data.get("difficulty", 0),
            loc=data.get("loc", 0),
            function_count=data.get("functionCount", 0),
            analyzed_at=data.get("analyzedAt", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "filePath": self.file_path,
            "maintainability": self.maintainability,
            "complexity": self.complexity,
            "difficulty": self.difficulty,
            "loc": self.loc,
            "functionCount": self.function_count,
            "analyzedAt": self.analyzed_at,
        }


@dataclass
class FileOutcome:
    """Result of analyzing and persisting one file during a run."""

    file_path: str
    health_level: HealthLevel | None = None
    report_path: Path | None = None
    maintainability: float | None = None
    complexity: int | None = None
    fallback: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.health_level is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "filePath": self.file_path,
            "success": self.success,
            "healthLevel": self.health_level.value if self.health_level else None,
            "reportPath": str(self.report_path) if self.report_path else None,
            "maintainability": self.maintainability,
            "complexity": self.complexity,
            "fallback": self.fallback,
            "error": self.error,
        }


@dataclass
class RunSummary:
    """Summary of a file or directory analysis run."""

    target: Path
    output_dir: Path
    outcomes: list[FileOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def successes(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failures(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def total(self) -> int:
        return len(self.successes)

    @property
    def errors(self) -> int:
        return len(self.failures)

    @property
    def distribution(self) -> dict[HealthLevel, int]:
        """Number of successfully analyzed files per tier, in tier order."""
        counts = {level: 0 for level in HealthLevel}
        for outcome in self.successes:
            counts[outcome.health_level] += 1  # type: ignore[index]
        return counts

    @property
    def average_complexity(self) -> float:
        values = [o.complexity for o in self.successes if o.complexity is not None]
        return round(sum(values) / len(values), 2) if values else 0

    @property
    def average_maintainability(self) -> float:
        values = [o.maintainability for o in self.successes if o.maintainability is not None]
        return round(sum(values) / len(values), 2) if values else 0

    @property
    def recommendations(self) -> list[dict[str, str]]:
        """Refactoring hints for complex or hard-to-maintain files."""
        recs: list[dict[str, str]] = []
        for outcome in self.successes:
            if outcome.complexity is not None and outcome.complexity > 10:
                recs.append(
                    {
                        "type": "high_complexity",
                        "filePath": outcome.file_path,
                        "message": f"High complexity ({outcome.complexity}) - consider refactoring",
                    }
                )
            if outcome.maintainability is not None and outcome.maintainability < 65:
                recs.append(
                    {
                        "type": "low_maintainability",
                        "filePath": outcome.file_path,
                        "message": (
                            f"Low maintainability ({outcome.maintainability:.1f}) - needs attention"
                        ),
                    }
                )
        return recs

    def percentage(self, level: HealthLevel) -> float:
        """Share of successful files in ``level``, as a percentage."""
        if self.total == 0:
            return 0.0
        return self.distribution[level] / self.total * 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "target": str(self.target),
            "outputDir": str(self.output_dir),
            "startedAt": self.started_at.isoformat(),
            "total": self.total,
            "errors": self.errors,
            "distribution": {level.value: count for level, count in self.distribution.items()},
            "averageComplexity": self.average_complexity,
            "averageMaintainability": self.average_maintainability,
            "recommendations": self.recommendations,
            "files": [o.to_dict() for o in self.outcomes],
        }
