"""
Configuration Management for hwprofile.

A small hierarchy of dataclasses mapped from a YAML file, with
``${VAR}`` / ``${VAR:default}`` expansion and HWPROFILE_* environment
overrides.

Public API
----------
    from hwprofile.core.config import Config, load_config

    config = load_config()            # ./hwprofile.yaml or ./config.yaml
    overrides = config.override_set()

Architecture
------------
    config/
    ├── base.py          # DetectionConfig, ReportingConfig
    └── config.py        # Main Config class
"""

from hwprofile.core.config.base import DetectionConfig, ReportingConfig
from hwprofile.core.config.config import Config
from hwprofile.core.config_loaders import expand_env_vars, load_config

__all__ = [
    "Config",
    "DetectionConfig",
    "ReportingConfig",
    "expand_env_vars",
    "load_config",
]
