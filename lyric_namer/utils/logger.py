"""Logging setup for the Lyric Namer command line.

Console output goes to stderr so that machine-readable command output
(``preview --json``) on stdout stays clean. The optional log file gets the
detailed format with timestamps and module names.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from lyric_namer.utils.constants import APP_NAME

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(module)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    log_level: str = "INFO",
    log_file: str | None = None,
) -> logging.Logger:
    """Configure and return the application logger.

    Calling this again only adjusts the level; handlers are attached once.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path of a log file, created with its parent folders.
    """
    logger = logging.getLogger(APP_NAME)
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(module_name: str | None = None) -> logging.Logger:
    """Return the app logger, or its child for e.g. ``'core.rule_matcher'``."""
    base = logging.getLogger(APP_NAME)
    return base.getChild(module_name) if module_name else base
