"""
Logging configuration for OptiHub.

All package loggers hang below the ``optihub`` logger. Console records go to
stderr so CLI reports on stdout stay clean; an optional rotating log file
receives the same records without colors.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

PACKAGE_LOGGER = "optihub"
NAME_WIDTH = 24

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


# ============================================================================
# Custom Formatter
# ============================================================================


class OptiHubFormatter(logging.Formatter):
    """Single-line formatter: ``[time] LEVEL [logger] message``.

    Logger names are shown relative to the package and trimmed from the
    left to a fixed width, so the most specific module stays visible.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        use_colors: bool = True,
        include_timestamp: bool = True,
        timestamp_format: str = "%H:%M:%S",
    ):
        """Initialize the formatter.

        Args:
            use_colors: Whether to color the level name (terminals only)
            include_timestamp: Whether to prefix each line with the time
            timestamp_format: strftime format for the prefix
        """
        super().__init__()
        self.use_colors = use_colors
        self.include_timestamp = include_timestamp
        self.timestamp_format = timestamp_format

    @staticmethod
    def short_name(name: str) -> str:
        if name.startswith(PACKAGE_LOGGER + "."):
            name = name[len(PACKAGE_LOGGER) + 1:]
        if len(name) > NAME_WIDTH:
            name = "…" + name[-(NAME_WIDTH - 1):]
        return name

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors and record.levelno in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelno]}{level}{self.RESET}"

        line = f"{level} [{self.short_name(record.name):{NAME_WIDTH}}] {record.getMessage()}"
        if self.include_timestamp:
            stamp = datetime.fromtimestamp(record.created).strftime(self.timestamp_format)
            line = f"[{stamp}] {line}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


# ============================================================================
# Setup Functions
# ============================================================================


def setup_logging(
    level: LogLevel = "INFO",
    log_dir: str | Path | None = None,
    console_output: bool = True,
    file_output: bool = True,
    log_filename: str = "optihub.log",
) -> logging.Logger:
    """(Re)configure the ``optihub`` logger. Safe to call repeatedly.

    Args:
        level: Minimum level for every handler
        log_dir: Directory for the rotating log file (needed when file_output=True)
        console_output: Whether to log to stderr
        file_output: Whether to log to ``log_dir / log_filename``
        log_filename: Name of the log file

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(OptiHubFormatter(use_colors=sys.stderr.isatty()))
        package_logger.addHandler(console_handler)

    if file_output and log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path / log_filename,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            OptiHubFormatter(use_colors=False, timestamp_format="%Y-%m-%d %H:%M:%S")
        )
        package_logger.addHandler(file_handler)

    package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger below the package logger, e.g. ``get_logger("cli")`` -> ``optihub.cli``."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


# ============================================================================
# Convenience Functions
# ============================================================================


def _format_context(context: dict[str, Any] | None) -> str:
    if not context:
        return ""
    return " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"


def log_operation(
    logger: logging.Logger,
    operation: str,
    details: dict[str, Any] | None = None,
) -> None:
    """Log the start of a user-facing operation at INFO."""
    logger.info(f"{operation}{_format_context(details)}")


def log_error(
    logger: logging.Logger,
    operation: str,
    error: BaseException,
    context: dict[str, Any] | None = None,
) -> None:
    """Log a failed operation with its traceback at ERROR."""
    logger.error(
        f"{operation} failed: {type(error).__name__}: {error}{_format_context(context)}",
        exc_info=error,
    )


# Console-only setup for early imports
setup_logging(level="INFO", console_output=True, file_output=False)
