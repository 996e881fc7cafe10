"""
ThreadRest Logging Configuration

One place to configure the root logger for the gateway process.

Usage:
    from utils.logging_config import setup_logging
    setup_logging(level="DEBUG", log_file="/var/log/threadrest.log")

Modules never configure logging themselves; they only do
    logger = logging.getLogger(__name__)
"""

import copy
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

_initialized = False

DEFAULT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DEBUG_FORMAT = "%(asctime)s | %(name)s:%(lineno)d | %(levelname)s | %(message)s"

LEVEL_COLORS = {
    'DEBUG': '\033[36m',     # Cyan
    'INFO': '\033[32m',      # Green
    'WARNING': '\033[33m',   # Yellow
    'ERROR': '\033[31m',     # Red
    'CRITICAL': '\033[35m',  # Magenta
}
RESET = '\033[0m'

# Third-party loggers that drown out gateway output at INFO
NOISY_LOGGERS = ['werkzeug', 'flask', 'urllib3', 'asyncio']


class ColoredFormatter(logging.Formatter):
    """Colors the level name when writing to a terminal."""

    def __init__(self, fmt=None, datefmt=None, use_colors=True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record):
        if self.use_colors and record.levelname in LEVEL_COLORS:
            # Other handlers share the record; color a copy only
            record = copy.copy(record)
            record.levelname = f"{LEVEL_COLORS[record.levelname]}{record.levelname}{RESET}"
        return super().format(record)


def parse_level(level: Union[int, str]) -> int:
    """'debug' / 'INFO' / 10 -> logging level int. Unknown names -> INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    use_colors: bool = True,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    suppress_libs: bool = True,
    force: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Level name or number; DEBUG also switches to a format with line numbers
        log_file: Optional path for a rotating log file
        use_colors: Colored level names on a terminal
        max_bytes: Max log file size before rotation
        backup_count: Rotated files to keep
        suppress_libs: Raise noisy third-party loggers to WARNING
        force: Reconfigure even if already set up
    """
    global _initialized

    if _initialized and not force:
        return

    level = parse_level(level)
    log_format = DEBUG_FORMAT if level <= logging.DEBUG else DEFAULT_FORMAT

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if use_colors:
        console_handler.setFormatter(ColoredFormatter(log_format))
    else:
        console_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(log_format))
        root_logger.addHandler(file_handler)

    if suppress_libs:
        for lib_name in NOISY_LOGGERS:
            logging.getLogger(lib_name).setLevel(logging.WARNING)

    _initialized = True


def get_logger(name: str = None) -> logging.Logger:
    """Logger for `name`, configuring defaults first if nobody has yet."""
    if not _initialized:
        setup_logging()
    return logging.getLogger(name)
