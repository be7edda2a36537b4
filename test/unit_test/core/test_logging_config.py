"""Unit tests for logging configuration module.

Tests verify that setup_logging wires the console and file handlers with the
requested level and format, and applies the per-module levels.
"""

import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from unipivot.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if type(h) is logging.StreamHandler),
        None,
    )
    assert handler is not None
    return handler


def _file_handlers():
    return [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    for handler in _file_handlers():
        handler.close()
    setup_logging(enable_file=False)


class TestSetupLoggingLevels:
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
    def test_console_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)
        assert _console_handler().level == expected_level

    def test_root_captures_everything(self):
        setup_logging(log_level="ERROR", enable_file=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_repeated_setup_does_not_duplicate_handlers(self):
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
    def test_console_format(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format

    def test_date_format(self):
        setup_logging(log_format="detailed", enable_file=False)
        assert _console_handler().formatter.datefmt == "%Y-%m-%d %H:%M:%S"


class TestSetupLoggingFileHandling:
    """Test setup_logging file logging."""

    def test_file_handler_when_directory_configured(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "logs"
            with (
                patch("unipivot.core.logging_config.LOG_FILE_DIR", str(log_dir)),
                patch("unipivot.core.logging_config.ENABLE_FILE_LOGGING", True),
            ):
                setup_logging(log_level="WARNING")

            handlers = _file_handlers()
            assert len(handlers) == 1
            assert handlers[0].level == logging.DEBUG
            assert Path(handlers[0].baseFilename) == log_dir / "unipivot.log"
            assert log_dir.is_dir()
            handlers[0].close()

    def test_file_logging_can_be_turned_off(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with (
                patch("unipivot.core.logging_config.LOG_FILE_DIR", tmpdir),
                patch("unipivot.core.logging_config.ENABLE_FILE_LOGGING", True),
            ):
                setup_logging(enable_file=False)
            assert _file_handlers() == []

    def test_no_file_handler_without_directory(self):
        with patch("unipivot.core.logging_config.ENABLE_FILE_LOGGING", False):
            setup_logging(enable_file=True)
        assert _file_handlers() == []


class TestModuleLevels:
    """Test per-module log levels."""

    def test_module_levels_applied(self):
        setup_logging(enable_file=False)
        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)

    def test_third_party_noise_reduced(self):
        setup_logging(enable_file=False)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("aiosqlite").level == logging.WARNING


def test_get_logger_returns_named_logger():
    logger = get_logger("unipivot.server.services.points")
    assert logger.name == "unipivot.server.services.points"
    assert logger is logging.getLogger("unipivot.server.services.points")
