"""Logging setup shared by the library and the CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = "villagesim"
FILE_FORMAT = "%(asctime)s | %(levelname)-5s | %(filename)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-5s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

log = logging.getLogger(LOGGER_NAME)


def setup_logging(level: int | str = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    log.setLevel(level)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    log.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        log.addHandler(file_handler)

    log.debug("Logging initialized. Log file: %s", log_file)
    return log
