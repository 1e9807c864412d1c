"""
Configuration Context

Responsibilities:
- Holds Prince option sets as immutable values
- Validates option values (input type, encryption key length)
- Loads option sets from YAML preset files

Owns: RenderOptions, EncryptionInfo, preset loading
Never: Assembles command lines or runs Prince
"""

from princepdf.contexts.configuration.exceptions import InputTypeError, InvalidOptionError
from princepdf.contexts.configuration.options import (
    DEFAULT_EXE_PATH,
    INPUT_TYPES,
    EncryptionInfo,
    RenderOptions,
)
from princepdf.contexts.configuration.presets import load_options, options_from_mapping

__all__ = [
    "DEFAULT_EXE_PATH",
    "INPUT_TYPES",
    "EncryptionInfo",
    "InputTypeError",
    "InvalidOptionError",
    "RenderOptions",
    "load_options",
    "options_from_mapping",
]
