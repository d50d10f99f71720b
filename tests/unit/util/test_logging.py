"""Unit tests for logging setup."""

import logging

import logfire

from discussion.config import Settings
from discussion.util.logging import log_level, setup_logging


class TestLogLevel:
    def test_debug_flag_wins(self):
        assert log_level(Settings(environment="production", debug=True)) == logging.DEBUG

    def test_production_only_warns(self):
        assert log_level(Settings(environment="production")) == logging.WARNING

    def test_development_logs_info(self):
        assert log_level(Settings(environment="development")) == logging.INFO


class TestSetupLogging:
    def test_root_logger_forwards_to_logfire(self):
        # Arrange
        root = logging.getLogger()
        previous = (root.level, root.handlers[:])

        try:
            # Act
            setup_logging(Settings(environment="development"))

            # Assert
            assert any(
                isinstance(h, logfire.LogfireLoggingHandler) for h in root.handlers
            )
            assert logging.getLogger("httpcore").level == logging.WARNING
            assert logging.getLogger("httpx").level == logging.INFO
        finally:
            root.handlers[:] = previous[1]
            root.setLevel(previous[0])
