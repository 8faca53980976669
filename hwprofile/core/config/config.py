"""
Main configuration class for hwprofile.

Architecture Context
--------------------
Configuration sits at the Core layer. The Config object is created once
at startup and handed to the detector and the reporting sink.

    hwprofile.yaml
           ↓
    load_config() → Config object
           ↓
    Passed to: HardwareDetector, OverrideSet, render_summary

Configuration Hierarchy
-----------------------
    Config
    ├── DetectionConfig    # Probe root, architecture, parallel probing
    ├── ReportingConfig    # Report on/off, level, log file
    ├── profile            # Forced performance profile
    └── overrides          # Per-fact operator overrides

Example hwprofile.yaml
----------------------
    detection:
      parallel: true
    reporting:
      log_level: debug
    profile: ${HWPROFILE_FORCED_PROFILE:}
    overrides:
      cpu:
        cores: 8
      virtualization:
        kind: bare-metal
"""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

from hwprofile.core.config.base import DetectionConfig, ReportingConfig
from hwprofile.core.exceptions import ConfigValidationError, OverrideValidationError
from hwprofile.detection.overrides import OverrideSet

_SECTIONS = ("detection", "reporting", "overrides")


@dataclass
class Config:
    """Main hwprofile configuration."""

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    profile: Optional[str] = None  # minimal, resource-constrained, balanced, high-performance
    overrides: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        assert isinstance(self.detection, DetectionConfig), "detection must be DetectionConfig"
        assert isinstance(self.reporting, ReportingConfig), "reporting must be ReportingConfig"
        if self.profile is not None and not isinstance(self.profile, str):
            raise ConfigValidationError(
                "profile must be a string", field="profile", value=self.profile
            )

    def override_set(self) -> OverrideSet:
        """Validate overrides (and the forced profile) into an OverrideSet.

        Raises:
            OverrideValidationError: If any override is invalid.
        """
        data = copy.deepcopy(self.overrides)
        if self.profile:
            data["performance_profile"] = self.profile
        return OverrideSet.from_mapping(data)

    def set_override(self, path: str, value: Any) -> None:
        """Set one dotted override (e.g. "cpu.cores") in place."""
        category, _, leaf = path.partition(".")
        if not leaf:
            self.overrides[category] = value
            return
        section = self.overrides.setdefault(category, {})
        if not isinstance(section, dict):
            raise OverrideValidationError(
                f"Override '{category}' must be a mapping",
                field=category,
                value=section,
            )
        section[leaf] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @staticmethod
    def _section(data: Mapping[str, Any], name: str) -> Dict[str, Any]:
        """Return a mapping section, rejecting non-mapping shapes."""
        value = data.get(name)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ConfigValidationError(
                f"'{name}' must be a mapping, got {type(value).__name__}",
                field=name,
                value=value,
            )
        return dict(value)

    @staticmethod
    def _filter_fields(cls_type: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        """Filter dict to only keys that match dataclass fields."""
        valid_keys = {f.name for f in fields(cls_type)}
        return {k: v for k, v in data.items() if k in valid_keys}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Config":
        """Create Config from a parsed YAML mapping.

        Raises:
            ConfigValidationError: If the document or a section has the wrong shape.
        """
        from hwprofile.core.config_loaders import expand_env_vars

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigValidationError(
                f"Configuration must be a mapping, got {type(data).__name__}",
                value=data,
            )

        data = expand_env_vars(dict(data))
        sections = {name: cls._section(data, name) for name in _SECTIONS}

        # An empty expansion (e.g. "${VAR:}") means no forced profile
        profile = data.get("profile") or None

        return cls(
            detection=DetectionConfig(
                **cls._filter_fields(DetectionConfig, sections["detection"])
            ),
            reporting=ReportingConfig(
                **cls._filter_fields(ReportingConfig, sections["reporting"])
            ),
            profile=profile,
            overrides=sections["overrides"],
        )
