"""Options, command-line parsing, encode/decode planning and byte I/O for FLIF image tools."""

__version__ = "0.1.0"

__all__ = ["arguments", "fileio", "options", "planning"]