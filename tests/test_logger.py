"""Tests for logger module."""

import logging
from unittest.mock import patch

from roomwatch.util.logger import (
    get_logger,
    setup_logger,
    should_use_color,
    ColorFormatter,
    PromptToolkitHandler,
    LOG_FORMAT,
    DATE_FORMAT,
)


def make_record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
        func="test_func",
    )


class TestShouldUseColor:
    """Tests for should_use_color function."""

    @patch('sys.stderr.isatty')
    def test_should_use_color_tty(self, mock_isatty):
        mock_isatty.return_value = True
        assert should_use_color() is True

    @patch('sys.stderr.isatty')
    def test_should_use_color_no_tty(self, mock_isatty):
        mock_isatty.return_value = False
        assert should_use_color() is False

    @patch('sys.stderr.isatty')
    def test_should_use_color_exception(self, mock_isatty):
        mock_isatty.side_effect = Exception("Error")
        assert should_use_color() is False


class TestColorFormatter:
    def test_color_formatter_wraps_error_in_red(self):
        formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        formatted = formatter.format(make_record(logging.ERROR, "Error message"))

        assert formatted.startswith("\033[31m")
        assert "Error message" in formatted

    def test_unknown_level_is_left_plain(self):
        formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        record = make_record(logging.INFO, "Custom")
        record.levelname = "CUSTOM"

        assert not formatter.format(record).startswith("\033[")


class TestSetupLogger:
    def test_setup_logger_creates_logger(self):
        logger = setup_logger("roomwatch_test_logger_1")

        assert logger.name == "roomwatch_test_logger_1"
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_setup_logger_returns_existing(self):
        logger1 = setup_logger("roomwatch_test_logger_2")
        logger2 = setup_logger("roomwatch_test_logger_2")

        assert logger1 is logger2
        assert len(logger1.handlers) == 2

    def test_console_handler_uses_prompt_toolkit(self):
        logger = get_logger("roomwatch_test_logger_3")

        assert any(isinstance(handler, PromptToolkitHandler) for handler in logger.handlers)

    def test_prompt_toolkit_handler_prints(self):
        handler = PromptToolkitHandler(formatter=logging.Formatter("%(message)s"))

        with patch("roomwatch.util.logger.print_formatted_text") as mock_print:
            handler.emit(make_record(logging.INFO, "hello"))

        mock_print.assert_called_once()
