"""
Structured Logging for hwprofile.

This module provides a logging infrastructure that supports context binding,
a stage-aware logger for the detection pipeline, and consistent formatting
across the package.

Architecture Context
--------------------
Logging is a Core layer service used by every module in the package. All
modules should import get_logger() from here rather than using Python's
logging directly:

    # Good - uses hwprofile's structured logging
    from hwprofile.core.logging import get_logger
    logger = get_logger(__name__)

    # Avoid - bypasses our structure
    import logging
    logger = logging.getLogger(__name__)

Logger Types
------------
**StructuredLogger**
    Base logger with context binding support. Allows attaching key-value pairs
    that appear in all subsequent log messages:

        logger = get_logger(__name__)
        logger.bind(run_id="a1b2c3")
        logger.info("Probing started")  # includes run_id

**DetectionLogger**
    Specialized for the detection pipeline. Tracks stages (probe, parse,
    aggregate) with timing:

        dlog = DetectionLogger(run_id)
        dlog.start_stage("probe")
        dlog.finish(success=True, profile="balanced")

Module-Level Factory
--------------------
The get_logger() function provides cached logger instances:

    logger = get_logger("hwprofile.detection.probe")

Loggers are cached by name, so multiple calls return the same instance.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_path: Optional[Path] = None
    console: bool = True


class StructuredLogger:
    """
    Structured logger with context support.

    Provides consistent logging across the package with
    support for structured fields and context tracking.
    """

    def __init__(self, name: str, config: Optional[LogConfig] = None) -> None:
        self.logger = logging.getLogger(name)
        self.config = config or LogConfig()
        self._context: dict[str, Any] = {}
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure the logger."""
        level = getattr(logging, self.config.level.upper(), logging.INFO)
        self.logger.setLevel(level)

        # Remove existing handlers
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            self.config.format,
            datefmt=self.config.date_format,
        )

        if self.config.console:
            # stderr keeps stdout free for command output (JSON, env lines)
            console_handler = RichHandler(
                console=Console(stderr=True),
                show_time=True,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            )
            console_handler.setLevel(level)
            self.logger.addHandler(console_handler)

        if self.config.file_path:
            self.config.file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.file_path)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def reconfigure(self, config: LogConfig) -> None:
        """Apply a new configuration to this logger."""
        self.config = config
        self._setup_logger()

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Attach context fields to every subsequent message."""
        self._context.update(kwargs)
        return self

    def _format_message(self, message: str, **kwargs: Any) -> str:
        """Format message with context and extra fields."""
        fields = {**self._context, **kwargs}
        if fields:
            field_str = " | ".join(f"{k}={v}" for k, v in fields.items())
            return f"{message} | {field_str}"
        return message

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self.logger.error(self._format_message(message, **kwargs))

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self.logger.exception(self._format_message(message, **kwargs))


# Module-level logger factory
_loggers: dict[str, StructuredLogger] = {}


def get_logger(name: str, config: Optional[LogConfig] = None) -> StructuredLogger:
    """
    Get or create a structured logger.

    Args:
        name: Logger name (typically __name__).
        config: Optional logging configuration. Defaults to the
            configuration installed by configure_logging().

    Returns:
        Configured StructuredLogger instance.
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, config or _ConfigHolder.get_config())
    return _loggers[name]


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:
    """
    Configure global logging settings.

    Already-created loggers are reconfigured so the new level applies
    to modules that were imported before configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional file path for log output.
        console: Whether to log to console.
    """
    config = LogConfig(
        level=level,
        file_path=log_file,
        console=console,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _ConfigHolder.set_config(config)

    for logger in _loggers.values():
        logger.reconfigure(config)


class _ConfigHolder:
    """Holds default logging configuration.

    Rule #6: Encapsulates singleton state in smallest scope.
    """

    _config: LogConfig = LogConfig()

    @classmethod
    def get_config(cls) -> LogConfig:
        """Get the default config."""
        return cls._config

    @classmethod
    def set_config(cls, config: LogConfig) -> None:
        """Set the default config."""
        cls._config = config


class DetectionLogger:
    """
    Specialized logger for detection runs.

    Tracks pipeline stages and provides timing information.
    """

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        self.logger = get_logger("hwprofile.pipeline")
        self._stage_start: Optional[datetime] = None
        self._current_stage: Optional[str] = None
        self._run_start = datetime.now()

    def start_stage(self, stage: str) -> None:
        """Mark the start of a pipeline stage."""
        self._finish_current_stage()
        self._current_stage = stage
        self._stage_start = datetime.now()
        self.logger.debug(
            "Starting stage",
            run_id=self.run_id,
            stage=stage,
        )

    def _finish_current_stage(self) -> None:
        """Log completion of current stage if any."""
        if self._current_stage and self._stage_start:
            duration = (datetime.now() - self._stage_start).total_seconds()
            self.logger.debug(
                "Completed stage",
                run_id=self.run_id,
                stage=self._current_stage,
                duration_sec=f"{duration:.3f}",
            )
        self._current_stage = None
        self._stage_start = None

    def finish(
        self, success: bool, profile: str = "", error: Optional[str] = None
    ) -> None:
        """Mark detection run completion."""
        self._finish_current_stage()
        duration = (datetime.now() - self._run_start).total_seconds()
        if success:
            self.logger.info(
                "Detection completed",
                run_id=self.run_id,
                performance_profile=profile,
                duration_sec=f"{duration:.3f}",
            )
        else:
            self.logger.error(
                "Detection failed",
                run_id=self.run_id,
                error=error,
            )
