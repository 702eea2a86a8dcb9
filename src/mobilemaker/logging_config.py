"""
Centralized logging configuration for mobilemaker.

Usage at the entry point (cli.py):

    from mobilemaker.logging_config import setup_logging
    setup_logging(level="INFO")

Modules log through ``logging.getLogger("mobilemaker.<area>")``; this
attaches a rich handler on stderr and, when a log directory is given (or
MOBILEMAKER_LOG_DIR is set), a plain-text file handler.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "mobilemaker"
LOG_FILE = "mobilemaker.log"

_initialized = False


def setup_logging(
    *,
    level: str = "WARNING",
    log_dir: Optional[str] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Initialize logging for mobilemaker. Safe to call more than once; only
    the level is updated on later calls.

    Args:
        level: Minimum level for the console handler.
        log_dir: Directory for ``mobilemaker.log``. Defaults to MOBILEMAKER_LOG_DIR.
        console: Rich console to render to (stderr by default).
    """
    global _initialized

    logger = logging.getLogger(LOGGER_NAME)
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    if _initialized:
        for handler in logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(numeric)
        return logger

    logger.setLevel(logging.DEBUG)

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(numeric)
    logger.addHandler(rich_handler)

    log_dir = log_dir or os.environ.get("MOBILEMAKER_LOG_DIR")
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / LOG_FILE, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    _initialized = True
    return logger
