"""Logging für Pipeline und Skripte.

Console output goes to stderr: the CLI scripts print their JSON result on
stdout. HTTP client libraries log every request at INFO, so they are held
at WARNING unless the pipeline itself runs at DEBUG.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

ROOT_LOGGER_NAME = "subsidy_matcher"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Drittanbieter-Logger, die pro Request loggen
NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """Attach console (and optional file) handlers to the package logger.

    Calling it again replaces the handlers instead of stacking them.

    Args:
        level: Level name for the subsidy_matcher loggers
        log_file: Optional path, parent directories are created
        stream: Console stream (default: sys.stderr)
        quiet_loggers: Library loggers capped at WARNING below DEBUG

    Returns:
        The subsidy_matcher root logger
    """
    numeric_level = _resolve_level(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(numeric_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(library_level)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger below the package root, e.g. get_logger("matching.pre_scoring")."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
