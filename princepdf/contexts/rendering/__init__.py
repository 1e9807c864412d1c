"""
Rendering Context

Responsibilities:
- Assembles Prince command lines from option sets
- Runs Prince and serves its stdin, stdout and stderr pipes
- Parses the Prince status protocol into a verdict and messages
- Reports conversion diagnostics

Owns: Command assembly, process orchestration, status protocol
Never: Decides option values (configuration context)
"""

from princepdf.contexts.rendering.command import build_command, format_command_line
from princepdf.contexts.rendering.converter import (
    ConversionResult,
    convert_file_to_file,
    convert_file_to_stream,
    convert_multiple_files,
    convert_multiple_files_to_stream,
    convert_string_to_file,
    convert_string_to_stream,
)
from princepdf.contexts.rendering.exceptions import ConversionFailedError, PrinceExecutionError
from princepdf.contexts.rendering.status_protocol import (
    RunVerdict,
    Severity,
    StatusLineParser,
    StatusMessage,
    StatusReport,
    parse_status_stream,
)

__all__ = [
    "ConversionFailedError",
    "ConversionResult",
    "PrinceExecutionError",
    "RunVerdict",
    "Severity",
    "StatusLineParser",
    "StatusMessage",
    "StatusReport",
    "build_command",
    "convert_file_to_file",
    "convert_file_to_stream",
    "convert_multiple_files",
    "convert_multiple_files_to_stream",
    "convert_string_to_file",
    "convert_string_to_stream",
    "format_command_line",
    "parse_status_stream",
]
