"""Outcome variants for a single harness invocation.

Every invocation attempt resolves to exactly one of the frozen
dataclasses below.  Each case knows the process exit code it maps to,
so the shutdown sequencer never has to inspect failure objects itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

SUCCESS_CODE: int = 0
USAGE_ERROR_CODE: int = 64
DEFAULT_FAILURE_CODE: int = 1


@dataclass(frozen=True, slots=True)
class Success:
    """The command completed without error."""

    @property
    def exit_code(self) -> int:
        return SUCCESS_CODE


@dataclass(frozen=True, slots=True)
class UsageFailure:
    """The argument parser rejected the invocation."""

    message: str
    usage: str | None = None

    @property
    def exit_code(self) -> int:
        return USAGE_ERROR_CODE


@dataclass(frozen=True, slots=True)
class ControlledExit:
    """A command deliberately aborted.

    ``code`` of ``None`` resolves to :data:`DEFAULT_FAILURE_CODE`.
    """

    message: str | None = None
    code: int | None = None
    stack_trace: str = ""
    hint: str | None = None

    @property
    def exit_code(self) -> int:
        return DEFAULT_FAILURE_CODE if self.code is None else self.code


@dataclass(frozen=True, slots=True)
class ImmediateExit:
    """Terminate now, skipping the shutdown sequence."""

    code: int

    @property
    def exit_code(self) -> int:
        return self.code


@dataclass(frozen=True, slots=True)
class Crash:
    """Any failure that is not a recognised termination request."""

    error: BaseException
    stack_trace: str

    @property
    def exit_code(self) -> int:
        return DEFAULT_FAILURE_CODE


Outcome = Union[Success, UsageFailure, ControlledExit, ImmediateExit, Crash]
