"""Utility functions and classes for tshealth."""

from tshealth.utils.config import AnalyzerSettings, ProjectConfig, get_settings
from tshealth.utils.files import collect_source_files

__all__ = [
    "AnalyzerSettings",
    "ProjectConfig",
    "collect_source_files",
    "get_settings",
]
