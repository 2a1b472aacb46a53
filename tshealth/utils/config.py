"""Configuration management for tshealth."""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Literal

import toml
from pydantic import Field
from pydantic_settings import BaseSettings

from tshealth.exceptions import ConfigError
from tshealth.utils.files import DEFAULT_EXCLUDE_DIRS, SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = "tshealth.toml"
NESTED_FUNCTION_POLICIES = ("include", "exclude")


class AnalyzerSettings(BaseSettings):
    """Runtime settings, overridable through ``TSHEALTH_*`` environment variables."""

    output_dir: Path = Path("reports")
    max_workers: int = Field(default=1, ge=1)
    graph_cache_size: int = Field(default=8, ge=1)
    nested_function_complexity: Literal["include", "exclude"] = "include"
    # 0 means no limit
    max_files: int = Field(default=0, ge=0)

    model_config = {
        "env_prefix": "TSHEALTH_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> AnalyzerSettings:
    """Get cached settings instance."""
    return AnalyzerSettings()


@dataclass
class ProjectConfig:
    """Per-project options loaded from ``tshealth.toml`` at the project root."""

    exclude: list[str] = field(default_factory=lambda: sorted(DEFAULT_EXCLUDE_DIRS))
    extensions: list[str] = field(default_factory=lambda: list(SOURCE_EXTENSIONS))
    nested_function_complexity: str | None = None

    @classmethod
    def from_project(cls, project_path: Path) -> "ProjectConfig":
        """Load configuration from tshealth.toml if it exists.

        ``exclude`` entries are added to the default excluded directories;
        ``extensions`` replaces the default extension list.

        Raises:
            ConfigError: If the file is not valid TOML or has invalid values
        """
        config_path = project_path / PROJECT_CONFIG_FILE
        config = cls()

        if not config_path.is_file():
            return config

        try:
            data = toml.load(config_path)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigError(f"Invalid {PROJECT_CONFIG_FILE} at {config_path}: {e}") from e

        if "exclude" in data:
            config.exclude = sorted(set(config.exclude) | set(_string_list(data, "exclude")))
        if "extensions" in data:
            extensions = _string_list(data, "extensions")
            config.extensions = [ext if ext.startswith(".") else f".{ext}" for ext in extensions]
        if "nested_function_complexity" in data:
            policy = data["nested_function_complexity"]
            if policy not in NESTED_FUNCTION_POLICIES:
                raise ConfigError(
                    f"nested_function_complexity must be one of {NESTED_FUNCTION_POLICIES}, "
                    f"got {policy!r}"
                )
            config.nested_function_complexity = policy

        logger.debug(f"Loaded project config from {config_path}")
        return config


def _string_list(data: dict, key: str) -> list[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' in {PROJECT_CONFIG_FILE} must be a list of strings")
    return value
