"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

from flutter_harness.core.outcomes import (
    DEFAULT_FAILURE_CODE,
    SUCCESS_CODE,
    USAGE_ERROR_CODE,
)

SUCCESS: int = SUCCESS_CODE
"""Clean exit — command completed without error."""

GENERAL_ERROR: int = DEFAULT_FAILURE_CODE
"""A controlled exit without an explicit code, or a crash."""

USAGE_ERROR: int = USAGE_ERROR_CODE
"""The argument parser rejected the command line (``EX_USAGE``)."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
