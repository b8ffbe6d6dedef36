"""
CLI Exit Codes
==============

Exit codes shared by the command-line tools.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    FILE_ERROR = 1       # Input file missing or unreadable
    INTERNAL_ERROR = 3   # Unexpected internal error
