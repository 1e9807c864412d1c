"""
Configuration context logger.

Provides logging interface for configuration context with automatic [config] prefix.
All configuration modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[config]"


def _log_warning(message: str) -> None:
    """Log warning message with [config] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [config] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
