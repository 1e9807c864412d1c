"""
princepdf - Prince XML/HTML to PDF driver

Builds Prince command lines, runs Prince without a shell and turns its
status protocol into a success/failure verdict with structured messages.

Architecture:
- Configuration Context: Immutable Prince option sets and YAML presets
- Rendering Context: Command assembly, process orchestration, status parsing
"""

__version__ = "0.1.0"
