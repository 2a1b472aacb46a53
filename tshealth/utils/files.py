"""Source-file collection for directory analyses."""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
DEFAULT_EXCLUDE_DIRS = frozenset(
    {"node_modules", ".next", "dist", "build", "out", ".git", "coverage"}
)


def is_source_file(path: Path, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> bool:
    """Check whether a path has one of the analyzed extensions."""
    return path.suffix in tuple(extensions)


def collect_source_files(
    target: Path,
    extensions: Iterable[str] = SOURCE_EXTENSIONS,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    max_files: int = 0,
) -> list[Path]:
    """Collect the source files to analyze under a file or directory.

    Args:
        target: A single source file or a directory to walk
        extensions: File suffixes to include
        exclude_dirs: Directory names skipped anywhere below ``target``
        max_files: Cap on the number of returned files, 0 for no cap

    Returns:
        Sorted list of source file paths
    """
    suffixes = tuple(extensions)
    if target.is_file():
        return [target] if target.suffix in suffixes else []
    if not target.is_dir():
        logger.warning(f"Analysis target does not exist: {target}")
        return []

    excluded = set(exclude_dirs)
    files = []
    for dirpath, dirnames, filenames in os.walk(target):
        # Pruned in place so excluded trees are never entered
        dirnames[:] = [name for name in dirnames if name not in excluded]
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.suffix in suffixes:
                files.append(path)

    files.sort()
    if max_files and len(files) > max_files:
        logger.info(f"Limiting analysis to {max_files} of {len(files)} files")
        files = files[:max_files]
    return files
