"""Project-wide module dependency graph and per-file dependency profiles.

The graph is built once per project root by scanning every source file for
module specifiers, resolving the project-internal ones to root-relative paths
and detecting import cycles. :class:`DependencyGraphCache` keeps built graphs
per root so all files analyzed under one root share a single build.
"""

import logging
import re
import threading
from collections import OrderedDict
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from tshealth.health.models import (
    DependencyEdge,
    DependencyGraph,
    DependencyProfile,
    DependentRecord,
)
from tshealth.utils.files import DEFAULT_EXCLUDE_DIRS, SOURCE_EXTENSIONS, collect_source_files
from tshealth.utils.path_safety import normalize_path, to_posix_relative

logger = logging.getLogger(__name__)

# import x from '...', import {a} from '...', export * from '...', export {a} from '...'
FROM_PATTERN = re.compile(r"""\b(?:import|export)\b[^;'"`]*?\bfrom\s*['"]([^'"]+)['"]""")
SIDE_EFFECT_IMPORT = re.compile(r"""\bimport\s*['"]([^'"]+)['"]""")
REQUIRE_CALL = re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)""")
DYNAMIC_IMPORT = re.compile(r"""\bimport\s*\(\s*['"]([^'"]+)['"]\s*\)""")
# String literals match first so comment markers inside them survive
COMMENT_OR_STRING = re.compile(
    r"""('(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)"""
    r"|/\*.*?\*/|//[^\n]*",
    re.DOTALL,
)
SPECIFIER_PATTERNS = (FROM_PATTERN, SIDE_EFFECT_IMPORT, REQUIRE_CALL, DYNAMIC_IMPORT)

PROBE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
INDEX_FILES = ("index.ts", "index.tsx")
STRIPPABLE_SUFFIX = re.compile(r"\.(tsx?)$")


def _keep_strings(match: re.Match[str]) -> str:
    return match.group(1) or ""


def extract_specifiers(text: str) -> list[str]:
    """Module specifiers referenced by a source text, in order of appearance.

    Covers static and side-effect imports, re-exports, ``require()`` calls and
    dynamic ``import()`` with a literal argument. Commented-out code is ignored.
    """
    stripped = COMMENT_OR_STRING.sub(_keep_strings, text)
    found: list[tuple[int, str]] = []
    for pattern in SPECIFIER_PATTERNS:
        found.extend((match.start(1), match.group(1)) for match in pattern.finditer(stripped))

    specifiers: list[str] = []
    for _, specifier in sorted(found):
        if specifier not in specifiers:
            specifiers.append(specifier)
    return specifiers


def probe_module_path(base: Path) -> Path | None:
    """Find the file a module path refers to.

    Tries the literal path (directories count), then each known source
    extension appended, then an index file inside it.
    """
    if base.exists():
        return base
    for extension in PROBE_EXTENSIONS:
        candidate = base.parent / f"{base.name}{extension}"
        if candidate.exists():
            return candidate
    for index_name in INDEX_FILES:
        candidate = base / index_name
        if candidate.exists():
            return candidate
    return None


def find_cycles(edges: dict[str, list[str]]) -> list[list[str]]:
    """Detect import cycles with a resolved/unresolved depth-first search.

    Each cycle is reported once, as the chain of files from the first file of
    the cycle to the one that closes it. A file importing itself forms a
    one-element cycle.

    Args:
        edges: Mapping of file to the files it depends on

    Returns:
        List of cycles in discovery order
    """
    cycles: list[list[str]] = []
    resolved: set[str] = set()
    # Insertion order is the DFS order; False marks finished nodes
    unresolved: dict[str, bool] = {}

    for start in edges:
        if start in resolved:
            continue
        unresolved[start] = True
        stack = [(start, iter(edges.get(start, ())))]
        while stack:
            node, deps = stack[-1]
            for dep in deps:
                if dep in resolved:
                    continue
                if unresolved.get(dep):
                    cycles.append(_cycle_path(dep, unresolved))
                    continue
                unresolved[dep] = True
                stack.append((dep, iter(edges.get(dep, ()))))
                break
            else:
                stack.pop()
                resolved.add(node)
                unresolved[node] = False
    return cycles


def _cycle_path(parent: str, unresolved: dict[str, bool]) -> list[str]:
    path: list[str] = []
    parent_visited = False
    for module, active in unresolved.items():
        if module == parent:
            parent_visited = True
        if parent_visited and active:
            path.append(module)
    return path


class GraphBuilder(Protocol):
    def build(self, project_root: Path) -> DependencyGraph: ...


class DependencyGraphBuilder:
    """Builds the import graph of a whole project."""

    def __init__(
        self,
        extensions: Iterable[str] = SOURCE_EXTENSIONS,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    ) -> None:
        self.extensions = tuple(extensions)
        self.exclude_dirs = frozenset(exclude_dirs)

    def resolve_specifier(self, specifier: str, importer: Path, root: Path) -> str | None:
        """Map a module specifier to a root-relative POSIX path.

        Relative specifiers resolve against the importing file, ``@/``
        specifiers against the project root. Bare package names return None.
        Internal specifiers that match no file are kept as root-relative text.
        """
        if specifier.startswith(("./", "../")) or specifier in (".", ".."):
            base = importer.parent / specifier
        elif specifier.startswith("@/"):
            base = root / specifier[2:]
        else:
            return None

        base = normalize_path(base)
        target = None
        if base.suffix == ".js":
            # ESM-style TypeScript imports name the emitted .js file
            for extension in (".ts", ".tsx"):
                candidate = base.with_suffix(extension)
                if candidate.is_file():
                    target = candidate
                    break
        if target is None:
            target = self._probe_file(base)
        return to_posix_relative(target or base, root)

    def _probe_file(self, base: Path) -> Path | None:
        if base.is_file():
            return base
        for extension in PROBE_EXTENSIONS:
            candidate = base.parent / f"{base.name}{extension}"
            if candidate.is_file():
                return candidate
        for extension in PROBE_EXTENSIONS:
            candidate = base / f"index{extension}"
            if candidate.is_file():
                return candidate
        return None

    def build(self, project_root: Path) -> DependencyGraph:
        """Scan a project and build its dependency graph.

        Args:
            project_root: Directory whose source files form the graph

        Returns:
            DependencyGraph keyed by root-relative POSIX paths

        Raises:
            NotADirectoryError: If the root is not a directory
        """
        root = Path(project_root).resolve()
        if not root.is_dir():
            raise NotADirectoryError(f"Project root is not a directory: {root}")

        files = collect_source_files(root, self.extensions, self.exclude_dirs)
        edges: dict[str, list[str]] = {}
        for path in files:
            key = to_posix_relative(path, root)
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning(f"Could not read {key} while building graph: {e}")
                edges[key] = []
                continue

            dependencies: list[str] = []
            for specifier in extract_specifiers(text):
                resolved = self.resolve_specifier(specifier, path, root)
                if resolved is not None and resolved not in dependencies:
                    dependencies.append(resolved)
            edges[key] = dependencies

        cycles = find_cycles(edges)
        logger.info(
            f"Built dependency graph for {root}: {len(edges)} files, {len(cycles)} cycles"
        )
        return DependencyGraph(project_root=root, edges=edges, cycles=cycles)


class DependencyGraphCache:
    """Per-root cache of built dependency graphs with LRU eviction."""

    def __init__(self, builder: GraphBuilder | None = None, capacity: int = 8) -> None:
        """Initialize the cache.

        Args:
            builder: Object whose ``build(root)`` produces a graph
            capacity: Maximum number of project roots kept
        """
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self.builder = builder or DependencyGraphBuilder()
        self.capacity = capacity
        self._graphs: OrderedDict[Path, DependencyGraph] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._graphs)

    def __contains__(self, project_root: object) -> bool:
        if not isinstance(project_root, (str, Path)):
            return False
        return Path(project_root).resolve() in self._graphs

    def get_or_build(self, project_root: Path) -> DependencyGraph:
        """Return the graph for a root, building it on first use.

        A failed build yields an empty graph that is not cached, so the next
        call retries.
        """
        key = Path(project_root).resolve()
        with self._lock:
            graph = self._graphs.get(key)
            if graph is not None:
                self._graphs.move_to_end(key)
                return graph

            try:
                graph = self.builder.build(key)
            except Exception as e:
                logger.warning(f"Failed to build dependency graph for {key}: {e}")
                return DependencyGraph(project_root=key)

            self._graphs[key] = graph
            while len(self._graphs) > self.capacity:
                evicted, _ = self._graphs.popitem(last=False)
                logger.debug(f"Evicted dependency graph for {evicted}")
            return graph

    def invalidate(self, project_root: Path) -> None:
        """Drop the cached graph of one root."""
        with self._lock:
            self._graphs.pop(Path(project_root).resolve(), None)

    def clear(self) -> None:
        with self._lock:
            self._graphs.clear()


def describe_edge(
    specifier: str, file_dir: Path, root: Path, internal: bool = False
) -> DependencyEdge:
    """Resolve and classify one outgoing dependency of a file.

    Args:
        specifier: Module specifier or root-relative graph path
        file_dir: Directory of the importing file
        root: Project root
        internal: Whether the specifier is known to name a project path, as
            every graph edge does; an unresolved one then stays internal
    """
    if specifier.startswith(("./", "../")):
        base, kind = file_dir / specifier, "relative"
    elif specifier.startswith("@/"):
        base, kind = root / specifier[2:], "internal-alias"
    elif specifier.startswith("/"):
        base, kind = Path(specifier), "absolute"
    else:
        base, kind = root / specifier, ""

    resolved = probe_module_path(normalize_path(base))
    if not kind:
        kind = "internal" if internal or resolved is not None else "external"

    return DependencyEdge(
        path=specifier,
        absolute_path=str(resolved) if resolved is not None else None,
        exists=resolved is not None,
        is_external=kind == "external",
        extension=Path(specifier).suffix,
        type=kind,
    )


def calculate_dependency_depth(
    key: str,
    edges: dict[str, list[str]],
    visited: frozenset[str] = frozenset(),
) -> int:
    """Longest dependency chain starting at ``key``.

    Each path keeps its own visited set, so cycles terminate while shared
    subgraphs are still measured along every route. A dependency that is not
    itself a graph key still adds one level.
    """
    if key in visited or key not in edges:
        return 0
    seen = visited | {key}
    max_depth = 0
    for dep in edges[key]:
        max_depth = max(max_depth, calculate_dependency_depth(dep, edges, seen) + 1)
    return max_depth


def candidate_keys(relative_path: str) -> list[str]:
    """Graph keys tried, in order, when looking a file up."""
    stripped = STRIPPABLE_SUFFIX.sub("", relative_path)
    return [relative_path, f"./{relative_path}", stripped, f"./{stripped}"]


def profile_file(file_path: Path, project_root: Path, graph: DependencyGraph) -> DependencyProfile:
    """Describe a file's position in the project dependency graph.

    Args:
        file_path: The analyzed file
        project_root: Root the graph was built for
        graph: Graph of that root

    Returns:
        DependencyProfile; zero counts with a note when the file is not part
        of the graph, or with ``error`` set when profiling itself failed
    """
    try:
        root = Path(project_root).resolve()
        relative = to_posix_relative(Path(file_path).resolve(), root)
        keys = candidate_keys(relative)
        found = next((k for k in keys if k in graph.edges), None)
        if found is None:
            return DependencyProfile(
                note=f"File not found in dependency tree. Tried keys: {', '.join(keys)}"
            )

        file_dir = Path(file_path).resolve().parent
        dependencies = [
            describe_edge(dep, file_dir, root, internal=True) for dep in graph.edges[found]
        ]
        dependents = [
            DependentRecord(
                path=other,
                absolute_path=str(normalize_path(root / other.replace("./", "", 1))),
            )
            for other, deps in graph.edges.items()
            if found in deps
        ]
        cycles = [list(cycle) for cycle in graph.cycles if found in cycle]
        depth = calculate_dependency_depth(found, graph.edges)
    except Exception as e:
        logger.warning(f"Dependency profiling failed for {file_path}: {e}")
        return DependencyProfile(error=str(e))

    return DependencyProfile(
        dependencies=dependencies,
        dependents=dependents,
        circular_dependencies=cycles,
        depth=depth,
    )
