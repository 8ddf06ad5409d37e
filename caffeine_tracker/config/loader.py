"""
Configuration management and loading.

Handles tracker settings read from a YAML file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from caffeine_tracker.storage.models import DEFAULT_MAX_CAFFEINE_MG

DEFAULT_DB_PATH = "caffeine_tracker.db"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class StorageConfig:
    """Where persisted slots are written."""
    path: str

    def __post_init__(self):
        if not self.path or not self.path.strip():
            raise ValueError("storage path cannot be empty")


@dataclass(frozen=True)
class ProfileConfig:
    """Defaults applied to a freshly created profile."""
    default_max_caffeine_mg: int

    def __post_init__(self):
        if self.default_max_caffeine_mg < 0:
            raise ValueError("default_max_caffeine_mg cannot be negative")


@dataclass(frozen=True)
class LoggingConfig:
    level: str

    def __post_init__(self):
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(f"logging level must be one of: {list(VALID_LOG_LEVELS)}")


@dataclass(frozen=True)
class TrackerConfig:
    """Complete tracker configuration."""
    storage: StorageConfig
    profile: ProfileConfig
    logging: LoggingConfig


def default_tracker_config() -> TrackerConfig:
    """Built-in configuration used when no file is given.

    The log level can be overridden with the LOG_LEVEL environment variable.
    """
    return TrackerConfig(
        storage=StorageConfig(path=DEFAULT_DB_PATH),
        profile=ProfileConfig(default_max_caffeine_mg=DEFAULT_MAX_CAFFEINE_MG),
        logging=LoggingConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    )


def load_tracker_config(path: str) -> TrackerConfig:
    """Load and validate tracker configuration from YAML file.

    Every section is optional; anything omitted keeps its default.
    Unknown keys are rejected so typos do not silently fall back.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated TrackerConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Tracker config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'storage', 'profile', 'logging'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    defaults = default_tracker_config()

    storage_data = _section(raw_config, 'storage', {'path'})
    profile_data = _section(raw_config, 'profile', {'default_max_caffeine_mg'})
    logging_data = _section(raw_config, 'logging', {'level'})

    path_value = storage_data.get('path', defaults.storage.path)
    if not isinstance(path_value, str):
        raise ValueError("'storage.path' must be a string")

    level = logging_data.get('level', defaults.logging.level)
    if not isinstance(level, str):
        raise ValueError("'logging.level' must be a string")

    return TrackerConfig(
        storage=StorageConfig(path=path_value),
        profile=ProfileConfig(
            default_max_caffeine_mg=_integer(
                profile_data,
                'default_max_caffeine_mg',
                defaults.profile.default_max_caffeine_mg,
                "profile"
            )
        ),
        logging=LoggingConfig(level=level.upper())
    )


def _section(raw_config: Dict[str, Any], name: str, allowed_keys: set) -> Dict[str, Any]:
    """Extract an optional section and reject unknown keys in it."""
    data = raw_config.get(name)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")

    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return data


def _integer(data: Dict[str, Any], key: str, default: int, path: str) -> int:
    value = data.get(key, default)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' in {path} must be an integer")
    return value
