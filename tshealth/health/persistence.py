"""Persistence of analysis records and the per-tier health index.

Each analyzed file gets a JSON record mirrored under the output directory.
Next to them, one index file per health tier (``excellent.json`` ...
``critical.json``) lists a rollup entry per file, most complex first.
"""

import json
import logging
import re
import threading
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from tshealth.exceptions import PersistenceError
from tshealth.health.models import AnalysisRecord, HealthIndexEntry, HealthLevel
from tshealth.utils.path_safety import to_posix_relative, validate_file_within_project

logger = logging.getLogger(__name__)

HEALTH_INDEX_FILES = frozenset(f"{level.value}.json" for level in HealthLevel)
SOURCE_SUFFIX = re.compile(r"\.(ts|tsx|js|jsx)$")

# Serializes the read-modify-write of each tier's index within the process
_INDEX_LOCKS = {level: threading.Lock() for level in HealthLevel}


def is_health_index_file(path: Path, output_dir: Path) -> bool:
    """Check whether a path is one of the tier index files of ``output_dir``."""
    return path.name in HEALTH_INDEX_FILES and path.parent.resolve() == output_dir.resolve()


def _write_json(path: Path, data: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        raise PersistenceError(path, str(e)) from e


def result_path(
    record: AnalysisRecord,
    source_root: Path,
    output_dir: Path,
    project_root: Path | None = None,
) -> Path:
    """Where the JSON record of an analyzed file is written.

    The file path is mirrored relative to ``project_root`` when it is given
    and exists, to nothing but the file name when ``source_root`` is a single
    file, and relative to ``source_root`` otherwise.

    Raises:
        PersistenceError: If the mirrored path escapes ``output_dir``
    """
    file_path = Path(record.file_path)
    if project_root is not None and Path(project_root).exists():
        relative = to_posix_relative(file_path, Path(project_root).resolve())
    elif Path(source_root).is_file():
        relative = file_path.name
    else:
        relative = to_posix_relative(file_path, Path(source_root).resolve())

    json_name, replaced = SOURCE_SUFFIX.subn(".json", relative)
    if not replaced:
        json_name = f"{relative}.json"

    output_root = Path(output_dir).resolve()
    target = output_root / json_name
    try:
        return validate_file_within_project(target, output_root)
    except ValueError as e:
        raise PersistenceError(target, str(e)) from e


def save_result(
    record: AnalysisRecord,
    source_root: Path,
    output_dir: Path,
    project_root: Path | None = None,
) -> Path:
    """Write an analysis record, replacing any earlier record of the file.

    Args:
        record: The record to write
        source_root: File or directory the analysis was started on
        output_dir: Root of the output tree
        project_root: Optional project root used for path mirroring

    Returns:
        Path of the written JSON file

    Raises:
        PersistenceError: If the record cannot be written
    """
    path = result_path(record, source_root, output_dir, project_root)
    _write_json(path, record.to_dict())
    logger.debug(f"Saved analysis of {record.file_path} to {path}")
    return path


def index_path(output_dir: Path, level: HealthLevel) -> Path:
    """Path of a tier's index file."""
    return Path(output_dir) / f"{level.value}.json"


def load_health_index(output_dir: Path, level: HealthLevel) -> list[HealthIndexEntry]:
    """Read a tier's index; missing or unreadable files give an empty list."""
    path = index_path(output_dir, level)
    if not path.exists():
        return []

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read health index {path}, starting empty: {e}")
        return []

    if not isinstance(data, list):
        logger.warning(f"Health index {path} is not a JSON array, starting empty")
        return []

    return [
        HealthIndexEntry.from_dict(item)
        for item in data
        if isinstance(item, dict) and "filePath" in item
    ]


def update_health_index(record: AnalysisRecord, output_dir: Path) -> Path:
    """Add or replace a file's entry in the index of its tier.

    The index keeps one entry per file path, sorted by complexity, most
    complex first. Entries left in other tiers by earlier analyses are not
    touched.

    Args:
        record: Freshly analyzed record
        output_dir: Root of the output tree

    Returns:
        Path of the rewritten index file

    Raises:
        PersistenceError: If the index cannot be written
    """
    level = record.health_level
    path = index_path(output_dir, level)

    with _INDEX_LOCKS[level]:
        entries = [
            entry
            for entry in load_health_index(output_dir, level)
            if entry.file_path != record.file_path
        ]
        entries.append(HealthIndexEntry.from_record(record))
        entries.sort(key=lambda entry: entry.complexity, reverse=True)
        _write_json(path, [entry.to_dict() for entry in entries])

    return path


def iter_analysis_records(output_dir: Path) -> Iterator[tuple[Path, dict[str, Any]]]:
    """Yield every stored analysis record under ``output_dir``.

    Tier index files are skipped, as are files that are not valid JSON
    objects.
    """
    output_root = Path(output_dir)
    if not output_root.is_dir():
        return

    for path in sorted(output_root.rglob("*.json")):
        if is_health_index_file(path, output_root):
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping unreadable record {path}: {e}")
            continue
        if isinstance(data, dict) and "filePath" in data:
            yield path, data


def _entry_from_stored(path: Path, data: dict[str, Any]) -> HealthIndexEntry:
    analysis = data["analysis"]
    modified = datetime.fromtimestamp(path.stat().st_mtime, timezone.utc)
    return HealthIndexEntry(
        file_path=data["filePath"],
        maintainability=analysis.get("maintainability", 0),
        complexity=analysis.get("complexity", 0),
        difficulty=analysis.get("difficulty", 0),
        loc=analysis.get("loc", 0),
        function_count=len(analysis.get("functions", [])),
        analyzed_at=modified.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    )


def rebuild_health_index(output_dir: Path) -> dict[HealthLevel, int]:
    """Regenerate all tier indexes from the stored records.

    Drops entries of files whose latest record moved to another tier.

    Args:
        output_dir: Root of the output tree

    Returns:
        Number of entries written per tier
    """
    entries: dict[HealthLevel, list[HealthIndexEntry]] = {level: [] for level in HealthLevel}
    for path, data in iter_analysis_records(output_dir):
        try:
            level = HealthLevel(data["healthLevel"])
            entry = _entry_from_stored(path, data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping malformed record {path}: {e}")
            continue
        entries[level].append(entry)

    for level, level_entries in entries.items():
        level_entries.sort(key=lambda entry: entry.complexity, reverse=True)
        with _INDEX_LOCKS[level]:
            _write_json(
                index_path(output_dir, level), [entry.to_dict() for entry in level_entries]
            )
        logger.info(f"Rebuilt {level.value} index with {len(level_entries)} entries")

    return {level: len(level_entries) for level, level_entries in entries.items()}
