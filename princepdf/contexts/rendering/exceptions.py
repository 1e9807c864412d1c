"""Exceptions raised while running Prince."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from princepdf.contexts.rendering.converter import ConversionResult


class PrinceExecutionError(Exception):
    """
    Exception raised when the Prince process cannot be started.

    Missing executable, permission denied and similar OS errors end up here.
    Not retried.

    Attributes:
        message: Error description
        command_line: The command line that failed to start
        original_error: The OSError raised by process creation
    """

    def __init__(
        self,
        message: str,
        command_line: str = "",
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.command_line = command_line
        self.original_error = original_error

        parts = [message]
        if command_line:
            parts.append(f"Command: {command_line}")
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class ConversionFailedError(Exception):
    """
    Exception raised by ConversionResult.raise_for_status() for a failed run.

    Attributes:
        result: The failed ConversionResult
    """

    def __init__(self, result: "ConversionResult"):
        self.result = result

        if result.timed_out:
            reason = "Prince timed out"
        elif not result.finished:
            reason = "Prince exited without reporting a result"
        else:
            reason = "Prince reported failure"

        parts = [reason]
        for error in result.errors[:5]:
            parts.append(f"  {error}")
        if len(result.errors) > 5:
            parts.append(f"  ... and {len(result.errors) - 5} more errors")

        super().__init__("\n".join(parts))
