"""
Tests for logging setup.

Run: python3 -m pytest tests/test_logging_config.py -v
"""

import logging
import logging.handlers
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from utils import logging_config
from utils.logging_config import ColoredFormatter, parse_level, setup_logging


@pytest.fixture
def root_logger():
    """Restore the root logger after a test reconfigures it."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_flag = logging_config._initialized
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    logging_config._initialized = saved_flag


class TestParseLevel:

    def test_names(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("WARNING") == logging.WARNING

    def test_int_passthrough(self):
        assert parse_level(15) == 15

    def test_unknown_is_info(self):
        assert parse_level("chatty") == logging.INFO


class TestSetupLogging:

    def test_console_handler(self, root_logger):
        setup_logging(level="WARNING", use_colors=False, force=True)

        assert root_logger.level == logging.WARNING
        assert len(root_logger.handlers) == 1
        assert logging.getLogger('werkzeug').level == logging.WARNING

    def test_rotating_file(self, root_logger, tmp_path):
        log_file = tmp_path / "logs" / "threadrest.log"
        setup_logging(level="INFO", log_file=str(log_file), use_colors=False, force=True)

        file_handlers = [h for h in root_logger.handlers
                         if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1

        logging.getLogger("rest.test").info("written to file")
        file_handlers[0].flush()
        assert "written to file" in log_file.read_text()

    def test_debug_format_has_line_numbers(self, root_logger):
        setup_logging(level="DEBUG", use_colors=False, force=True)
        assert "%(lineno)d" in root_logger.handlers[0].formatter._fmt

    def test_second_call_is_noop(self, root_logger):
        setup_logging(level="ERROR", use_colors=False, force=True)
        setup_logging(level="DEBUG", use_colors=False)
        assert root_logger.level == logging.ERROR


class TestColoredFormatter:

    def test_record_not_mutated(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s")
        formatter.use_colors = True
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "hello", None, None)

        output = formatter.format(record)

        assert "\033[33m" in output
        assert record.levelname == "WARNING"
