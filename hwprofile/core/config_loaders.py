"""
Configuration Loading Functions.

Handles loading configuration from YAML and applying HWPROFILE_*
environment overrides.

Configuration precedence: 1. Env vars, 2. YAML file, 3. Defaults

Environment Variables
---------------------
    HWPROFILE_ROOT            detection.root
    HWPROFILE_PARALLEL        detection.parallel (true/false)
    HWPROFILE_LOG_LEVEL       reporting.log_level (info/debug)
    HWPROFILE_PROFILE         forced performance profile
    HWPROFILE_CPU_CORES       overrides.cpu.cores
    HWPROFILE_CPU_VENDOR      overrides.cpu.vendor
    HWPROFILE_MEMORY_GB       overrides.memory.total_gb
    HWPROFILE_VIRTUALIZATION  overrides.virtualization.kind

Invalid values fail fast instead of falling back to defaults.
"""

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, FrozenSet, Optional

import yaml

from hwprofile.core.env import (
    get_env_bool,
    get_env_int,
    get_env_str,
    get_env_whitelist,
)
from hwprofile.core.exceptions import ConfigValidationError, OverrideValidationError

if TYPE_CHECKING:
    from hwprofile.core.config import Config

CONFIG_FILENAMES = ("hwprofile.yaml", "config.yaml")

LOG_LEVELS: FrozenSet[str] = frozenset(["info", "debug"])


class _Logger:
    """Lazy logger holder.

    Rule #6: Encapsulates logger state in smallest scope.
    """

    _instance = None

    @classmethod
    def get(cls) -> Any:
        """Get logger (lazy-loaded)."""
        if cls._instance is None:
            from hwprofile.core.logging import get_logger

            cls._instance = get_logger(__name__)
        return cls._instance


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Handles strings with ${VAR_NAME} or ${VAR_NAME:default} syntax inside
    nested dictionaries and lists.

    Args:
        value: Configuration value (string, dict, list, or primitive)

    Returns:
        Value with all environment variables expanded
    """
    if isinstance(value, str):
        pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

        def replace_env_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    # Return primitives (int, float, bool, None) unchanged
    return value


def _apply_env_overrides(config: "Config") -> "Config":
    """
    Apply environment variable overrides to configuration.

    Environment variables take precedence over config file values.
    """
    _apply_detection_overrides(config)
    _apply_reporting_overrides(config)
    _apply_fact_overrides(config)
    return config


def _apply_detection_overrides(config: "Config") -> None:
    root = get_env_str("HWPROFILE_ROOT")
    if root:
        config.detection.root = root

    parallel = get_env_bool("HWPROFILE_PARALLEL")
    if parallel is not None:
        config.detection.parallel = parallel


def _apply_reporting_overrides(config: "Config") -> None:
    level = get_env_whitelist("HWPROFILE_LOG_LEVEL", LOG_LEVELS)
    if level:
        config.reporting.log_level = level


def _apply_fact_overrides(config: "Config") -> None:
    """Apply per-fact overrides; enum values are checked by OverrideSet.

    Rule #1: Table dispatch eliminates nesting
    """
    profile = get_env_str("HWPROFILE_PROFILE")
    if profile:
        config.profile = profile

    cores = get_env_int(
        "HWPROFILE_CPU_CORES", min_value=1, error=OverrideValidationError
    )
    if cores is not None:
        config.set_override("cpu.cores", cores)

    memory_gb = get_env_int(
        "HWPROFILE_MEMORY_GB", min_value=0, error=OverrideValidationError
    )
    if memory_gb is not None:
        config.set_override("memory.total_gb", memory_gb)

    string_overrides = {
        "HWPROFILE_CPU_VENDOR": "cpu.vendor",
        "HWPROFILE_VIRTUALIZATION": "virtualization.kind",
    }
    for name, path in string_overrides.items():
        value = get_env_str(name)
        if value:
            config.set_override(path, value.lower())


def _find_config_file(base_path: Path) -> Optional[Path]:
    for filename in CONFIG_FILENAMES:
        candidate = base_path / filename
        if candidate.exists():
            return candidate
    return None


def _read_yaml(config_path: Path) -> Any:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(
            f"Could not parse {config_path}: {e}", field=str(config_path)
        ) from e


def load_config(
    config_path: Optional[Path] = None, base_path: Optional[Path] = None
) -> "Config":
    """
    Load configuration from YAML file with environment variable overrides.

    Configuration precedence: 1. Env vars, 2. YAML file, 3. Defaults

    Args:
        config_path: Path to config file. Defaults to hwprofile.yaml or
            config.yaml in base_path.
        base_path: Directory searched for a config file. Defaults to cwd.

    Returns:
        Config object with all settings.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
        ConfigValidationError: If the file is malformed.
        OverrideValidationError: If any override is invalid.
    """
    from hwprofile.core.config import Config

    if config_path is None:
        config_path = _find_config_file(base_path or Path.cwd())
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path is None:
        config = Config()
    else:
        _Logger.get().debug("Loading configuration", path=str(config_path))
        config = Config.from_dict(_read_yaml(config_path))

    config = _apply_env_overrides(config)

    # Fail fast: overrides are validated at configuration time
    config.override_set()
    return config
