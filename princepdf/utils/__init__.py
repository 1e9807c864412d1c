"""
Shared utilities for princepdf.

Common functionality used across contexts:
- Command-line escaping
- Logger setup
- PDF inspection
- Timestamps
"""

from princepdf.utils.escaping import add_double_quotes, escape_argument
from princepdf.utils.timestamp import now

__all__ = ["add_double_quotes", "escape_argument", "now"]
