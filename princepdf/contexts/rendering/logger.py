"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from loguru import logger

from princepdf.contexts.configuration.options import DEFAULT_EXE_PATH
from princepdf.utils.logger import setup_logger as _setup_logger

if TYPE_CHECKING:
    from princepdf.contexts.rendering.converter import ConversionResult

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, exe_path: str = DEFAULT_EXE_PATH) -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session
        exe_path: Prince executable recorded in the provenance header

    Returns:
        Path to log file

    Example:
        from princepdf.contexts.rendering.logger import setup_rendering_logger, _log_info

        log_file = setup_rendering_logger(log_dir)
        _log_info("Starting conversion...")
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Prince executable": exe_path},
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_conversion_start(inputs: Sequence[str], output: str, command_line: str) -> None:
    """Log start of a conversion with context."""
    _log_info(f"Starting conversion: {', '.join(inputs)}")
    _log_debug(f"  Output: {output}")
    _log_debug(f"  Command: {command_line}")


def log_conversion_result(
    result: "ConversionResult",
    elapsed_time: float,
    verbose: bool = False,
) -> None:
    """
    Log conversion result with diagnostics.

    Args:
        result: ConversionResult from one of the convert_* functions
        elapsed_time: Time taken to convert
        verbose: Show every message instead of the first few (default: False)
    """
    if result.success:
        _log_success(f"Conversion succeeded: {len(result.warnings)} warnings ({elapsed_time:.2f}s)")
        if result.pdf_path:
            _log_debug(f"  PDF: {result.pdf_path}")
    elif result.timed_out:
        _log_error(f"Conversion timed out ({elapsed_time:.2f}s)")
    elif not result.finished:
        _log_error(f"Prince exited without a final status (exit code {result.returncode})")
    else:
        _log_error(f"Conversion failed: {len(result.errors)} errors ({elapsed_time:.2f}s)")

    error_limit = 10 if verbose else 5
    for i, err in enumerate(result.errors[:error_limit], 1):
        _log_error(f"  Error {i}: {err}")
    if len(result.errors) > error_limit:
        _log_error(f"  ... and {len(result.errors) - error_limit} more errors")

    # Warnings at debug level (can be verbose)
    if result.warnings:
        _log_warning(f"{len(result.warnings)} warnings reported")
        warning_limit = len(result.warnings) if verbose else 3
        for i, warn in enumerate(result.warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")
        if len(result.warnings) > warning_limit:
            _log_debug(f"  ... and {len(result.warnings) - warning_limit} more warnings")

    for info in result.infos:
        _log_debug(f"  Info: {info}")
