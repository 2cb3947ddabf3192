from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from .config import LOG_NAME, LOG_LEVEL, LOG_DATE_FORMAT


# Custom levels sit between INFO (20) and WARNING (30)
STEP_LEVEL = 25
SUCCESS_LEVEL = 22

logging.addLevelName(STEP_LEVEL, "STEP")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")


class LogSource:
    """
    Constants naming the component a message comes from, for consistent
    tagging and coloring.
    """
    READER = "Reader"
    WRITER = "Writer"
    GRAMMAR = "Grammar"
    STYLE = "Style"
    SEARCH = "Search"


class LogCategory:
    """
    Constants for log categories used as semantic tags on each message.
    """
    READ = "READ"
    WRITE = "WRITE"
    PARSE = "PARSE"
    RENDER = "RENDER"
    SEARCH = "SEARCH"
    ERROR = "ERROR"
    DEBUG = "DEBUG"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that prefixes messages with their source and category tags and
    adds ANSI colors when writing to a terminal.
    """

    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD_CYAN = "\033[1;36m"
    BOLD_GREEN = "\033[1;32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BOLD_RED = "\033[1;31m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    GREEN = "\033[32m"
    DARK_GRAY = "\033[90m"
    RESET = "\033[0m"

    LEVEL_COLORS = {
        "DEBUG": CYAN,
        "INFO": WHITE,
        "STEP": BOLD_CYAN,
        "SUCCESS": BOLD_GREEN,
        "WARNING": YELLOW,
        "ERROR": RED,
        "CRITICAL": BOLD_RED,
    }

    SOURCE_COLORS = {
        LogSource.READER: BLUE,
        LogSource.WRITER: GREEN,
        LogSource.GRAMMAR: MAGENTA,
        LogSource.STYLE: CYAN,
        LogSource.SEARCH: YELLOW,
    }

    CATEGORY_COLORS = {
        LogCategory.READ: BLUE,
        LogCategory.WRITE: GREEN,
        LogCategory.PARSE: MAGENTA,
        LogCategory.RENDER: CYAN,
        LogCategory.SEARCH: YELLOW,
        LogCategory.ERROR: RED,
        LogCategory.DEBUG: DARK_GRAY,
    }

    def __init__(self, fmt: str, use_color: bool = True, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt=datefmt)
        self.use_color = use_color

    def _tag(self, value: str, colors: dict) -> str:
        if self.use_color and value in colors:
            return f"{colors[value]}[{value}]{self.RESET}"
        return f"[{value}]"

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the record with source/category tags, restoring the record's
        message and level name afterwards so other handlers see them unchanged.
        """
        original_msg = record.msg
        original_levelname = record.levelname

        source = getattr(record, "source", None)
        category = getattr(record, "category", None)

        if self.use_color and record.levelname in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[record.levelname]}{record.levelname}{self.RESET}"

        parts = []
        if source:
            parts.append(self._tag(source, self.SOURCE_COLORS))
        if category:
            parts.append(self._tag(category, self.CATEGORY_COLORS))
        if parts:
            record.msg = f"{' '.join(parts)} {record.msg}"

        try:
            return super().format(record)
        finally:
            record.msg = original_msg
            record.levelname = original_levelname


class CategoryAdapter(logging.LoggerAdapter):
    """
    Adapter that moves the source and category keyword arguments into the
    record's extra dict.
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = dict(kwargs.get("extra") or {})

        source = kwargs.pop("source", None)
        if source:
            extra["source"] = source

        category = kwargs.pop("category", None)
        if category:
            extra["category"] = category

        kwargs["extra"] = extra
        return msg, kwargs


class Logger:
    """
    Library logger built on the standard logging module, with source and
    category tags, STEP and SUCCESS levels, colored console output on a
    terminal and optional mirroring to a log file.
    """

    LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(message)s"

    def __init__(self, name: str = LOG_NAME, level: str = LOG_LEVEL):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._logger.handlers.clear()

        # Console handler goes to stderr so records written to stdout stay clean
        self._console_handler = logging.StreamHandler(sys.stderr)
        self._console_handler.setLevel(level)
        use_color = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
        self._console_handler.setFormatter(
            ColoredFormatter(self.LOG_FORMAT, use_color=use_color, datefmt=LOG_DATE_FORMAT)
        )
        self._logger.addHandler(self._console_handler)

        self._file_handler: Optional[logging.FileHandler] = None
        self._log_file_path: Optional[str] = None

        self._adapter = CategoryAdapter(self._logger, {})

    def set_level(self, level) -> None:
        """
        Change the console threshold, e.g. "DEBUG" to trace every record.
        """
        self._console_handler.setLevel(level)

    def set_log_file(self, path: str) -> None:
        """
        Start mirroring every message, at all levels, to the given file.
        """
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        self.close()
        handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(ColoredFormatter(self.LOG_FORMAT, use_color=False, datefmt=LOG_DATE_FORMAT))
        self._logger.addHandler(handler)
        self._file_handler = handler
        self._log_file_path = path

    def close(self) -> None:
        """
        Stop mirroring to the log file, if any.
        """
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None
            self._log_file_path = None

    def step(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        """
        Log a top-level workflow step.
        """
        self._adapter.log(STEP_LEVEL, msg, source=source, category=category)

    def debug(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        self._adapter.debug(msg, source=source, category=category)

    def info(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        self._adapter.info(msg, source=source, category=category)

    def warn(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        self._adapter.warning(msg, source=source, category=category)

    def error(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        self._adapter.error(msg, source=source, category=category)

    def success(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        """
        Log a successful operation.
        """
        self._adapter.log(SUCCESS_LEVEL, msg, source=source, category=category)

    @property
    def log_file_path(self) -> Optional[str]:
        return self._log_file_path


# Global logger instance
logger = Logger()
