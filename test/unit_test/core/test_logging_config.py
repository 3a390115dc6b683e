"""Unit tests for logging configuration module.

Tests verify that the logging configuration functions work correctly with different
scenarios including various log levels, formats, and file logging options.
"""

import logging
import logging.handlers
from unittest.mock import patch

import pytest

from buildboss.core import logging_config
from buildboss.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SECURITY_LOGGER_NAME,
    SIMPLE_FORMAT,
    get_logger,
    get_security_logger,
    setup_logging,
)


def _console_handler():
    return next(
        (h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler),
        None,
    )


class TestSetupLoggingLogLevels:
    """Test setup_logging with different log levels."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("debug", logging.DEBUG),
        ],
    )
    def test_setup_logging_with_different_levels(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        console_handler = _console_handler()
        assert console_handler is not None
        assert console_handler.level == expected_level

    def test_root_logger_passes_everything_to_handlers(self):
        setup_logging(log_level="ERROR", enable_file=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_handlers_are_replaced_not_stacked(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)
        assert len(logging.getLogger().handlers) == 1


class TestSetupLoggingFormats:
    """Test setup_logging with different log formats."""

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_setup_logging_with_different_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format


class TestModuleLevels:
    """Per-module levels applied by setup_logging."""

    def test_third_party_noise_reduced(self):
        setup_logging(enable_file=False)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_buildboss_modules_configured(self):
        setup_logging(enable_file=False)
        for name in ("buildboss.server", "buildboss.core.database", SECURITY_LOGGER_NAME):
            assert name in MODULE_LOG_LEVELS
            assert logging.getLogger(name).level == logging.INFO


class TestFileLogging:
    """Rotating file handler behind ENABLE_FILE_LOGGING."""

    def test_file_handler_when_enabled(self, tmp_path):
        with patch.object(logging_config, "ENABLE_FILE_LOGGING", True), patch.object(
            logging_config, "LOG_FILE_DIR", str(tmp_path / "logs")
        ):
            setup_logging(enable_file=True)

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert (tmp_path / "logs" / "buildboss.log").exists()
        for handler in file_handlers:
            handler.close()
        setup_logging(enable_file=False)

    def test_no_file_handler_when_disabled(self):
        with patch.object(logging_config, "ENABLE_FILE_LOGGING", False):
            setup_logging(enable_file=True)
        assert not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logging.getLogger().handlers)


class TestGetLogger:
    def test_named_logger(self):
        assert get_logger("buildboss.server.api").name == "buildboss.server.api"

    def test_security_logger(self):
        assert get_security_logger().name == SECURITY_LOGGER_NAME
