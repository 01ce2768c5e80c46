"""
================================================================================
Logging Configuration
================================================================================

Centralized Loguru setup for the suite. Call `init_logger()` once at session
start; modules then simply `from loguru import logger`.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader


DEFAULT_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

_logger_initialized: bool = False


def init_logger(
    level: Optional[str] = None,
    format_str: Optional[str] = None,
    config: Optional[ConfigLoader] = None,
) -> None:
    """
    Initialize the global Loguru logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to `logging.level`.
        format_str: Log format. Defaults to `logging.format`.
        config: Configuration source. Defaults to the ConfigLoader singleton.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    config = config or ConfigLoader()
    log_level = (level or config.get("logging.level", "INFO")).upper()
    log_format = format_str or config.get("logging.format", DEFAULT_FORMAT)

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    log_file = config.get("logging.file")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=log_level,
            format=log_format.replace("{level: <8}", "{level}"),
            rotation=config.get("logging.rotation", "10 MB"),
            retention=config.get("logging.retention", "7 days"),
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


def reset_logger() -> None:
    """Allow `init_logger()` to run again (tests, config reload)."""
    global _logger_initialized
    _logger_initialized = False


__all__ = [
    "init_logger",
    "reset_logger",
]
