"""
Logging configuration for podman-lifecycle.

Every module logs through the same named logger so that a single
``LOG_LEVEL`` / ``LOG_FILE`` pair controls the whole package.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOGGER_NAME = "podman-lifecycle"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the package logger name.

    Returns:
        Configured logger instance.
    """
    if name is None:
        name = DEFAULT_LOGGER_NAME

    logger_instance = logging.getLogger(name)

    # Only configure if not already configured
    if not logger_instance.handlers:
        configure_logger(logger_instance)

    return logger_instance


def configure_logger(logger_instance: logging.Logger) -> None:
    """
    Configure a logger instance with console and optional file handlers.

    Args:
        logger_instance: Logger instance to configure.
    """
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    logger_instance.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'
    )

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(path)
            file_handler.setFormatter(formatter)
            logger_instance.addHandler(file_handler)
        except OSError as e:
            # If file logging fails, just use console
            print(f"Warning: Could not set up file logging: {e}", file=sys.stderr)

    # Console handler goes to stderr; stdout carries workflow progress lines
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger_instance.addHandler(console_handler)


logger = get_logger(DEFAULT_LOGGER_NAME)


__all__ = ["get_logger", "logger", "configure_logger"]
