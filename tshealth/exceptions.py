"""Exceptions raised by tshealth."""

from pathlib import Path


class TsHealthError(Exception):
    """Base class for tshealth errors."""


class SourceReadError(TsHealthError):
    """A source file could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}")


class PersistenceError(TsHealthError):
    """An analysis record or health index could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write {path}: {reason}")


class ConfigError(TsHealthError):
    """A project configuration file is invalid."""
