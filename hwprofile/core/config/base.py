"""
Section configuration classes for detection and reporting settings.

Each section validates its own field types so that a malformed YAML
file fails at load time instead of midway through a detection run.
"""

from dataclasses import dataclass
from typing import Optional

from hwprofile.core.exceptions import ConfigValidationError

LOG_LEVELS = ("info", "debug")


def _require_type(section: str, name: str, value: object, expected: type) -> None:
    # bool is an int subclass; reject it where a real type is expected
    if isinstance(value, bool) and expected is not bool:
        raise ConfigValidationError(
            f"{section}.{name} must be {expected.__name__}, got bool",
            field=f"{section}.{name}",
            value=value,
        )
    if not isinstance(value, expected):
        raise ConfigValidationError(
            f"{section}.{name} must be {expected.__name__}, "
            f"got {type(value).__name__}",
            field=f"{section}.{name}",
            value=value,
        )


@dataclass
class DetectionConfig:
    """Where and how detection probes the system."""

    root: str = "/"  # Probe root; a fixture tree in tests
    machine: Optional[str] = None  # Architecture; None = platform.machine()
    parallel: bool = False  # Fan category probes out to a thread pool

    def __post_init__(self) -> None:
        _require_type("detection", "root", self.root, str)
        if self.machine is not None:
            _require_type("detection", "machine", self.machine, str)
        _require_type("detection", "parallel", self.parallel, bool)


@dataclass
class ReportingConfig:
    """Detection report logging."""

    enable: bool = True
    log_level: str = "info"  # info, debug
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        _require_type("reporting", "enable", self.enable, bool)
        _require_type("reporting", "log_level", self.log_level, str)
        if self.log_level not in LOG_LEVELS:
            raise ConfigValidationError(
                f"reporting.log_level must be one of {', '.join(LOG_LEVELS)}",
                field="reporting.log_level",
                value=self.log_level,
            )
        if self.log_file is not None:
            _require_type("reporting", "log_file", self.log_file, str)
