"""Failure classifier — maps a caught failure to an :data:`Outcome`.

This is the single place where the type of a failure is inspected.
It is a pure function: no printing, no I/O.

| Failure                               | Outcome         | Exit code  |
|---------------------------------------|-----------------|------------|
| ``UsageError``                        | UsageFailure    | 64         |
| ``ToolExit`` with ``exit_code``       | ControlledExit  | that code  |
| ``ToolExit`` without ``exit_code``    | ControlledExit  | 1          |
| ``ProcessExit(immediate=True)``       | ImmediateExit   | given code |
| ``ProcessExit(immediate=False)``      | ControlledExit  | given code |
| ``SystemExit``                        | as ProcessExit  |            |
| anything else                         | Crash           | 1          |
"""

from __future__ import annotations

import traceback

from flutter_harness.core.outcomes import (
    ControlledExit,
    Crash,
    ImmediateExit,
    Outcome,
    UsageFailure,
)
from flutter_harness.exceptions import ProcessExit, ToolExit, UsageError


def format_stack_trace(error: BaseException) -> str:
    """Render the traceback attached to *error* as a single string."""
    return "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    )


def classify(error: BaseException, stack_trace: str | None = None) -> Outcome:
    """Return the outcome for *error*.

    Parameters
    ----------
    error:
        The failure captured by the boundary.
    stack_trace:
        Trace captured at the point of failure.  Rendered from
        ``error.__traceback__`` when omitted.
    """
    if stack_trace is None:
        stack_trace = format_stack_trace(error)

    if isinstance(error, UsageError):
        return UsageFailure(message=error.message, usage=error.usage)

    if isinstance(error, ToolExit):
        return ControlledExit(
            message=error.message,
            code=error.exit_code,
            stack_trace=stack_trace,
            hint=error.hint,
        )

    if isinstance(error, SystemExit):
        error = ProcessExit.from_system_exit(error)

    if isinstance(error, ProcessExit):
        if error.immediate:
            return ImmediateExit(code=error.exit_code)
        return ControlledExit(
            message=error.message,
            code=error.exit_code,
            stack_trace=stack_trace,
        )

    return Crash(error=error, stack_trace=stack_trace)
