"""
Tests for Structured Logging.

This module tests the logging infrastructure including StructuredLogger,
DetectionLogger, and the get_logger factory.

Test Strategy
-------------
- Focus on logger behavior, not stdlib logging internals
- Keep tests simple and readable (NASA JPL Rule #1: Simple Control Flow)
- Test context binding, stage tracking, message formatting
- Don't test Rich library integration (external dependency)

Organization
------------
- TestLogConfig: LogConfig dataclass
- TestStructuredLogger: StructuredLogger class
- TestGetLogger: get_logger factory function
- TestDetectionLogger: DetectionLogger class
- TestConfigureLogging: configure_logging function
"""

import logging
from pathlib import Path

from hwprofile.core.logging import (
    DetectionLogger,
    LogConfig,
    StructuredLogger,
    configure_logging,
    get_logger,
)


# ============================================================================
# Test Classes
# ============================================================================


class TestLogConfig:
    """Tests for LogConfig dataclass.

    Rule #4: Focused test class - tests only LogConfig
    """

    def test_default_values(self):
        """Test LogConfig with default values."""
        config = LogConfig()

        assert config.level == "INFO"
        assert config.console is True
        assert config.file_path is None

    def test_custom_values(self):
        """Test LogConfig with custom values."""
        log_file = Path("/tmp/hwprofile.log")
        config = LogConfig(level="DEBUG", file_path=log_file, console=False)

        assert config.level == "DEBUG"
        assert config.file_path == log_file
        assert config.console is False


class TestStructuredLogger:
    """Tests for StructuredLogger class.

    Rule #4: Focused test class - tests only StructuredLogger
    """

    def test_create_logger(self):
        """Test creating a StructuredLogger."""
        logger = StructuredLogger("test_logger")

        assert logger.logger.name == "test_logger"
        assert logger._context == {}

    def test_info_method(self, caplog):
        """Test info logging method."""
        logger = StructuredLogger("test")

        with caplog.at_level(logging.INFO):
            logger.info("Test message")

        assert "Test message" in caplog.text

    def test_debug_method(self, caplog):
        """Test debug logging method."""
        logger = StructuredLogger("test", LogConfig(level="DEBUG"))

        with caplog.at_level(logging.DEBUG):
            logger.debug("Debug message")

        assert "Debug message" in caplog.text

    def test_keyword_fields_formatted(self, caplog):
        """Keyword arguments are appended as key=value pairs."""
        logger = StructuredLogger("test.fields")

        with caplog.at_level(logging.WARNING):
            logger.warning("Fell back", facts="cpu.core_count")

        assert "Fell back" in caplog.text
        assert "facts=cpu.core_count" in caplog.text

    def test_bind_adds_context(self, caplog):
        """Bound context appears in every later message."""
        logger = StructuredLogger("test.bind")
        logger.bind(run_id="abc123")

        with caplog.at_level(logging.INFO):
            logger.info("First", stage="probe")

        message = caplog.records[-1].getMessage()
        assert "run_id=abc123" in message
        assert "stage=probe" in message

    def test_file_handler_writes(self, tmp_path):
        """A configured log file receives messages."""
        log_file = tmp_path / "logs" / "hwprofile.log"
        logger = StructuredLogger(
            "test.file", LogConfig(file_path=log_file, console=False)
        )

        logger.info("Written to file")
        for handler in logger.logger.handlers:
            handler.flush()

        assert "Written to file" in log_file.read_text()


class TestGetLogger:
    """Tests for get_logger factory function.

    Rule #4: Focused test class - tests only get_logger()
    """

    def test_returns_structured_logger(self):
        """Test get_logger returns StructuredLogger."""
        assert isinstance(get_logger("test.module"), StructuredLogger)

    def test_caches_loggers(self):
        """Test that get_logger caches logger instances."""
        assert get_logger("test.cached") is get_logger("test.cached")

    def test_different_names_different_loggers(self):
        """Test that different names return different loggers."""
        logger1 = get_logger("test.one")
        logger2 = get_logger("test.two")

        assert logger1 is not logger2
        assert logger1.logger.name == "test.one"


class TestDetectionLogger:
    """Tests for DetectionLogger class.

    Rule #4: Focused test class - tests only DetectionLogger
    """

    def test_create_detection_logger(self):
        """Test creating a DetectionLogger."""
        dlog = DetectionLogger("run_123")

        assert dlog.run_id == "run_123"
        assert dlog._current_stage is None

    def test_start_stage(self, caplog):
        """Stage start is logged at debug level with the run id."""
        configure_logging(level="DEBUG")
        dlog = DetectionLogger("run_456")

        with caplog.at_level(logging.DEBUG):
            dlog.start_stage("probe")

        assert "Starting stage" in caplog.text
        assert "run_456" in caplog.text
        assert dlog._current_stage == "probe"

    def test_next_stage_completes_previous(self, caplog):
        """Starting a stage logs completion of the previous one."""
        configure_logging(level="DEBUG")
        dlog = DetectionLogger("run_stages")

        with caplog.at_level(logging.DEBUG):
            dlog.start_stage("probe")
            dlog.start_stage("parse")

        assert "Completed stage" in caplog.text
        assert "stage=probe" in caplog.text
        assert "duration_sec=" in caplog.text

    def test_finish_success(self, caplog):
        """Test finishing detection with success."""
        dlog = DetectionLogger("run_789")

        with caplog.at_level(logging.INFO):
            dlog.finish(success=True, profile="balanced")

        assert "Detection completed" in caplog.text
        assert "performance_profile=balanced" in caplog.text

    def test_finish_failure(self, caplog):
        """Test finishing detection with failure."""
        dlog = DetectionLogger("run_fail")

        with caplog.at_level(logging.ERROR):
            dlog.finish(success=False, error="probe root missing")

        assert "Detection failed" in caplog.text
        assert "probe root missing" in caplog.text


class TestConfigureLogging:
    """Tests for configure_logging function.

    Rule #4: Focused test class - tests only configure_logging()
    """

    def test_configure_with_defaults(self):
        """Test configure_logging with default arguments."""
        configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_reconfigures_cached_loggers(self):
        """Loggers created before configuration pick up the new level."""
        logger = get_logger("test.reconfigured")

        configure_logging(level="WARNING")

        assert logger.logger.level == logging.WARNING
