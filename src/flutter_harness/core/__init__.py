"""Core layer — outcome model, classification, failure capture, shutdown.

Rules
-----
* No ``print()`` calls.
* No imports from ``cli`` or ``infra``.
* Collaborators are reached only through :mod:`.protocols`.
"""

from flutter_harness.core.boundary import CapturedFailure, FailureBoundary
from flutter_harness.core.classifier import classify, format_stack_trace
from flutter_harness.core.outcomes import (
    ControlledExit,
    Crash,
    ImmediateExit,
    Outcome,
    Success,
    UsageFailure,
)
from flutter_harness.core.shutdown import ShutdownHooks, ShutdownSequencer

__all__: list[str] = [
    "CapturedFailure",
    "ControlledExit",
    "Crash",
    "FailureBoundary",
    "ImmediateExit",
    "Outcome",
    "ShutdownHooks",
    "ShutdownSequencer",
    "Success",
    "UsageFailure",
    "classify",
    "format_stack_trace",
]
