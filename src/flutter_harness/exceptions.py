"""Custom exception hierarchy for flutter-harness.

Commands signal expected terminations by raising one of the classes
below.  The failure classifier recognises them; anything else that
escapes a command is treated as a crash.

Hierarchy
---------
HarnessError
├── UsageError
├── ToolExit
├── ProcessExit
├── ShutdownStateError
└── EnvironmentError
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base exception for all flutter-harness errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command-line usage ----------------------------------------------------

class UsageError(HarnessError):
    """Raised when the argument parser rejects the invocation."""

    def __init__(self, message: str, usage: str | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.usage: str | None = usage


# --- Deliberate termination ------------------------------------------------

class ToolExit(HarnessError):
    """Raised by a command to abort with an optional message and exit code.

    When *exit_code* is ``None`` the process exits with ``1``.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        exit_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message or "", hint=hint)
        self.message: str | None = message
        self.exit_code: int | None = exit_code


class ProcessExit(HarnessError):
    """Raised to request process termination with *exit_code*.

    An *immediate* request skips the shutdown sequence entirely.
    """

    def __init__(
        self,
        exit_code: int,
        *,
        immediate: bool = False,
        message: str | None = None,
    ) -> None:
        super().__init__(message or f"ProcessExit: {exit_code}")
        self.exit_code: int = exit_code
        self.immediate: bool = immediate
        self.message: str | None = message

    @classmethod
    def from_system_exit(cls, exc: SystemExit) -> ProcessExit:
        """Translate a :class:`SystemExit` raised by a command.

        ``sys.exit()`` means 0, an integer is the code, and any other
        payload is printed as a message with code 1.
        """
        code = exc.code
        if code is None:
            return cls(0)
        if isinstance(code, int):
            return cls(code)
        return cls(1, message=str(code))


# --- Lifecycle -------------------------------------------------------------

class ShutdownStateError(HarnessError):
    """Raised when a single-use shutdown resource is used twice."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(HarnessError):
    """Raised when a required runtime dependency is not available."""
