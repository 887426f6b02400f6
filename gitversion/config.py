#!/usr/bin/env python3

import os
import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import logging
import sys

import yaml

from .domain import DEFAULT_ABBREV, DEFAULT_RELEASE_BRANCHES
from .exit_codes import ConfigError

logger = logging.getLogger("gitversion")

CONFIG_ENV_VAR = "GITVERSION_CONFIG"
ENV_PREFIX = "GITVERSION_"
CONFIG_FILENAMES = ['.gitversion.json', '.gitversion.toml', '.gitversion.yaml', '.gitversion.yml']

# Keys that hold lists; env overrides split these on commas
LIST_KEYS = {"release_branches"}


def configure_logging(level: Union[str, int] = "WARNING", fmt: str = "%(levelname)s: %(message)s") -> None:
    """Send gitversion log records to stderr at the given level."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    handler = logging.StreamHandler(sys.stderr)  # stdout carries the version
    handler.setFormatter(logging.Formatter(fmt))
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "tag_prefix": "",
        "restrict_directory": False,
        "release_branches": list(DEFAULT_RELEASE_BRANCHES),
        "abbrev": DEFAULT_ABBREV,
        "git_timeout": 30,
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        }
    }


def get_config_path(start_dir: Union[str, Path] = ".") -> Optional[Path]:
    """Get the path to the configuration file.

    Checks in order:
    1. GITVERSION_CONFIG environment variable
    2. .gitversion.{json,toml,yaml,yml} in the project directory
    3. pyproject.toml in the project directory, if it has a [tool.gitversion] table

    Returns None when the project has no configuration file.
    """
    if CONFIG_ENV_VAR in os.environ:
        path = Path(os.environ[CONFIG_ENV_VAR]).expanduser()
        if path.exists():
            return path
        logger.warning(f"{CONFIG_ENV_VAR} points at missing file {path}")

    project_dir = Path(start_dir).expanduser()
    for filename in CONFIG_FILENAMES:
        path = project_dir / filename
        if path.is_file():
            return path

    pyproject = project_dir / "pyproject.toml"
    if pyproject.is_file() and _read_pyproject_table(pyproject) is not None:
        return pyproject

    return None


def _read_pyproject_table(path: Path) -> Optional[Dict[str, Any]]:
    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return None
    return data.get("tool", {}).get("gitversion")


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Read one configuration file.

    Format is picked by suffix: TOML, YAML, otherwise JSON. For
    pyproject.toml only the [tool.gitversion] table is used.

    Raises:
        ConfigError: If the file cannot be parsed
    """
    try:
        if config_path.name == "pyproject.toml":
            return _read_pyproject_table(config_path) or {}
        if config_path.suffix.lower() == '.toml':
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f)
        else:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Error parsing config {config_path}: {e}")

    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise ConfigError(f"Config {config_path} must contain a mapping")
    return file_config


def load_config(start_dir: Union[str, Path] = ".") -> Dict[str, Any]:
    """Load configuration for the project in start_dir.

    Defaults are overlaid by the project config file, then by
    GITVERSION_* environment variables.
    """
    config = get_default_config()

    config_path = get_config_path(start_dir)
    if config_path is not None:
        try:
            config = merge_configs(config, read_config_file(config_path))
            logger.debug(f"Loaded config from {config_path}")
        except OSError as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    return apply_env_overrides(config)


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> Path:
    """Save configuration to file, format picked by suffix."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.suffix.lower() == '.toml':
        import toml
        with open(config_path, 'w') as f:
            toml.dump(config, f)
    elif config_path.suffix.lower() in ['.yaml', '.yml']:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
    else:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)
            f.write("\n")

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def _coerce_env_value(key: str, value: str) -> Any:
    if key in LIST_KEYS:
        return [item.strip() for item in value.split(',') if item.strip()]
    if value.lower() in ('true', 'yes', 'on'):
        return True
    if value.lower() in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    return value


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GITVERSION_SECTION_KEY
    For example: GITVERSION_TAG_PREFIX=v or GITVERSION_LOGGING_LEVEL=DEBUG
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == CONFIG_ENV_VAR:
            continue

        key_parts = env_key[len(ENV_PREFIX):].lower().split('_')

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                if matched_key == "tag_prefix":
                    # Prefixes are literal; "1" must stay a string
                    current_level[matched_key] = value
                else:
                    current_level[matched_key] = _coerce_env_value(matched_key, value)
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                break

    return config


@dataclass
class VersionConfig:
    """
    Typed view of the settings version resolution uses.

    Attributes:
        tag_prefix: Literal text expected before the version number in tag names
        restrict_directory: Only count commits touching the project directory
        release_branches: Branches whose builds get no branch suffix
        abbrev: Length of the commit id in version names
        git_timeout: Seconds before a git command is abandoned
    """
    tag_prefix: str = ""
    restrict_directory: bool = False
    release_branches: List[str] = field(default_factory=lambda: list(DEFAULT_RELEASE_BRANCHES))
    abbrev: int = DEFAULT_ABBREV
    git_timeout: int = 30

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VersionConfig':
        """
        Build from a merged configuration dict.

        Raises:
            ConfigError: If a value has the wrong type
        """
        defaults = cls()
        release_branches = data.get("release_branches", defaults.release_branches)
        if isinstance(release_branches, str):
            release_branches = [release_branches]
        if not isinstance(release_branches, (list, tuple, set)):
            raise ConfigError("release_branches must be a list of branch names")

        try:
            abbrev = int(data.get("abbrev", defaults.abbrev))
            git_timeout = int(data.get("git_timeout", defaults.git_timeout))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}")
        if abbrev < 4 or abbrev > 40:
            raise ConfigError(f"abbrev must be between 4 and 40, got {abbrev}")

        restrict_directory = data.get("restrict_directory", defaults.restrict_directory)
        if isinstance(restrict_directory, str):
            restrict_directory = _coerce_env_value("restrict_directory", restrict_directory)
        if not isinstance(restrict_directory, bool):
            raise ConfigError(f"restrict_directory must be true or false, got {restrict_directory!r}")

        tag_prefix = data.get("tag_prefix", defaults.tag_prefix)
        return cls(
            tag_prefix="" if tag_prefix is None else str(tag_prefix),
            restrict_directory=restrict_directory,
            release_branches=[str(b) for b in release_branches],
            abbrev=abbrev,
            git_timeout=git_timeout,
        )

    @classmethod
    def load(cls, start_dir: Union[str, Path] = ".", **overrides) -> 'VersionConfig':
        """Load project configuration, then apply non-None keyword overrides."""
        config = load_config(start_dir)
        config.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(config)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tag_prefix': self.tag_prefix,
            'restrict_directory': self.restrict_directory,
            'release_branches': list(self.release_branches),
            'abbrev': self.abbrev,
            'git_timeout': self.git_timeout,
        }
