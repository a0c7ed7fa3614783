"""Shared modules for sugarkube.

This module provides functionality used across all commands:
- Logging configuration
- Cache paths
- External process execution
"""

from .logging import DEFAULT_LOG_LEVEL, LOG_LEVELS, configure_logging, get_logger
from .paths import CACHE_DIR, SUGARKUBE_DIR, ensure_cache_dir
from .process import format_command, run_command

__all__ = [
    # Paths
    "SUGARKUBE_DIR",
    "CACHE_DIR",
    "ensure_cache_dir",
    # Logging
    "LOG_LEVELS",
    "DEFAULT_LOG_LEVEL",
    "configure_logging",
    "get_logger",
    # Processes
    "format_command",
    "run_command",
]
