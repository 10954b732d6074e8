"""
Unit Tests for the structured backend logger.
"""

import logging

import pytest

from backend.lib.logger import ColoredFormatter, StructuredLogger, get_logger


class TestStructuredLogger:

    @pytest.fixture
    def logger(self):
        return get_logger("backend.test")

    def test_data_rendered_as_key_values(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger="backend.test"):
            logger.info("Answer processed", data={"depth": 3, "flags": {"contradiction": False}})

        message = caplog.records[-1].getMessage()
        assert "Answer processed" in message
        assert "  depth: 3" in message
        assert "    contradiction: False" in message

    def test_long_lists_truncated(self, logger):
        rendered = logger._format_data(list(range(10)))
        assert "- 0" in rendered
        assert "- 3" not in rendered
        assert "(10 items total)" in rendered

    def test_failure_is_warning(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger="backend.test"):
            logger.failure("no_active_session", "Initialize a topic first")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "no_active_session" in record.getMessage()

    def test_response_includes_duration(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger="backend.test"):
            logger.response(200, "/api/sessions/x/answer", duration=0.25)
        assert "duration_ms: 250.00" in caplog.records[-1].getMessage()

    def test_wraps_given_logger(self):
        inner = logging.getLogger("backend.inner")
        assert StructuredLogger("x", inner).logger is inner


class TestColoredFormatter:

    def test_plain_output_without_colors(self):
        formatter = ColoredFormatter(use_colors=False)
        record = logging.LogRecord("socratix_tutor.orchestrator", logging.INFO, __file__, 1, "hello", None, None)
        output = formatter.format(record)
        assert "hello" in output
        assert "\033[" not in output
