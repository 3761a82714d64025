"""
Utilities module for podman-lifecycle.

This module provides common utilities like logging configuration.
"""

from __future__ import annotations

from podman_lifecycle.utils.logger import get_logger, logger

__all__ = ["get_logger", "logger"]
