"""Exceptions raised while building Prince option sets."""

from typing import Any, Iterable, Optional


class InvalidOptionError(ValueError):
    """
    Exception raised when an option name or value is not accepted.

    Attributes:
        message: Error description
        option: Name of the offending option
        value: The rejected value
    """

    def __init__(self, message: str, option: Optional[str] = None, value: Any = None):
        self.message = message
        self.option = option
        self.value = value
        super().__init__(message)


class InputTypeError(InvalidOptionError):
    """Exception raised for an input type Prince does not understand."""

    def __init__(self, value: Any, allowed: Iterable[str]):
        allowed_list = ", ".join(sorted(allowed))
        super().__init__(
            f"Invalid input type: {value!r} (must be one of {allowed_list})",
            option="input_type",
            value=value,
        )
