"""Logging configuration.

Console logging for the build and server processes, plus an optional log
file. Handler failures from detached dispatch tasks are reported through
log_exception() since no request is left to carry them.
"""
from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_file_handler: Optional[logging.FileHandler] = None


def configure_logging(level: str | int = logging.INFO, log_file: Path | None = None) -> None:
    """Configure console (and optionally file) logging for the package.

    Args:
        level: Log level name or number
        log_file: Also append records to this file
    """
    global _file_handler

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    pkg_logger = logging.getLogger("slashtree")
    pkg_logger.setLevel(level)

    if log_file is not None:
        if _file_handler is not None:
            pkg_logger.removeHandler(_file_handler)
            _file_handler.close()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        _file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        pkg_logger.addHandler(_file_handler)


def log_exception(
    error: BaseException,
    context: str = "",
    logger: logging.Logger | None = None,
) -> str:
    """Log an exception with its traceback.

    Args:
        error: The exception to log
        context: What was happening when it was raised
        logger: Logger to use (default: the package logger)

    Returns:
        Short message without the traceback
    """
    logger = logger or logging.getLogger("slashtree")

    error_type = type(error).__name__
    if context:
        user_msg = f"{context}: {error}"
    else:
        user_msg = f"{error_type}: {error}"

    tb_str = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    logger.error(f"{user_msg}\n\nTraceback:\n{tb_str}")

    return user_msg
