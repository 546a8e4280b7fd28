"""CLI application entry point and top-level error boundary.

This module is the **sole error boundary** for the application.  Every
invocation follows the same pipeline:

1. dispatch the command inside a :class:`FailureBoundary`;
2. classify the first failure, if any, into an outcome;
3. report the outcome (usage hint, exit message, or crash report);
4. run the shutdown sequence and exit with the outcome's code.

Architecture notes
------------------
* No business logic lives here — commands do the work.
* This module is the only place that translates between the domain
  world and the OS process exit code.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable, Sequence

from flutter_harness.cli import exit_codes
from flutter_harness.cli.command_runner import ToolCommandRunner
from flutter_harness.cli.commands import Command, default_commands
from flutter_harness.cli.console import console
from flutter_harness.cli.context import HarnessContext
from flutter_harness.config import HarnessSettings
from flutter_harness.core.classifier import classify
from flutter_harness.core.outcomes import (
    ControlledExit,
    Crash,
    ImmediateExit,
    Outcome,
    Success,
    UsageFailure,
)
from flutter_harness.infra.bot_detector import is_running_on_bot
from flutter_harness.utils.logger import bind_context, clear_context, configure_logging
from flutter_harness.version import get_version_string

VERBOSE_FLAGS: tuple[str, ...] = ("-v", "--verbose")
HELP_FLAGS: tuple[str, ...] = ("-h", "--help")


# ---------------------------------------------------------------------------
# Harness
# ---------------------------------------------------------------------------

async def run(
    args: Sequence[str],
    commands: Sequence[Command],
    *,
    context: HarnessContext | None = None,
    mute_command_logging: bool = False,
    verbose: bool = False,
    verbose_help: bool = False,
    report_crashes: bool | None = None,
    flutter_version: str | None = None,
) -> int:
    """Run the tool with support for *commands*.

    Parameters
    ----------
    args:
        The invocation — command-line arguments without the program name.
    commands:
        Commands to register.  Must not be empty.
    context:
        Collaborators for this run; a default one is built from the
        environment when omitted.
    mute_command_logging:
        Strip ``-v`` / ``--verbose`` before dispatch (help and doctor
        runs do not need verbose logs).
    verbose:
        Print the stack trace of controlled exits.
    verbose_help:
        Include hidden commands in help output.
    report_crashes:
        Upload crash reports.  Defaults to "not running on CI".
    flutter_version:
        Version string override for crash reports.

    Returns
    -------
    int
        The resolved exit code, after the exit primitive has been called.
    """
    if not commands:
        raise ValueError("At least one command is required.")

    context = context or HarnessContext.create(HarnessSettings.from_env())
    if report_crashes is None:
        report_crashes = not is_running_on_bot(context.environ)

    if mute_command_logging:
        args = [arg for arg in args if arg not in VERBOSE_FLAGS]
    invocation = tuple(args)

    runner = ToolCommandRunner(
        prog=context.settings.tool_name,
        verbose_help=verbose_help,
        commands=commands,
    )

    def get_version() -> str:
        return flutter_version or get_version_string()

    boundary = context.boundary
    bind_context(invocation=" ".join(invocation))
    try:
        failure = await boundary.run(lambda: runner.run(invocation, context))
        if failure is None:
            outcome: Outcome = Success()
        else:
            outcome = classify(failure.error, failure.stack_trace)

        outcome = await _handle_outcome(
            outcome,
            context,
            invocation,
            verbose=verbose,
            report_crashes=report_crashes,
            get_version=get_version,
        )

        if isinstance(outcome, ImmediateExit):
            return context.sequencer.exit_immediately(outcome.code)
        return await context.sequencer.exit(outcome.exit_code)
    finally:
        boundary.close()
        clear_context()


async def _handle_outcome(
    outcome: Outcome,
    context: HarnessContext,
    invocation: tuple[str, ...],
    *,
    verbose: bool,
    report_crashes: bool,
    get_version: Callable[[], str],
) -> Outcome:
    """Print what the user needs to see for *outcome*."""
    out = context.console
    tool = context.settings.tool_name

    if isinstance(outcome, UsageFailure):
        out.print(f"{outcome.message}\n", markup=False, soft_wrap=True)
        out.print(
            f"Run '{tool} -h' (or '{tool} <command> -h') "
            f"for available {tool} commands and options.",
            markup=False,
            soft_wrap=True,
        )
    elif isinstance(outcome, ControlledExit):
        if outcome.message:
            out.print(outcome.message, markup=False, soft_wrap=True)
        if outcome.hint:
            out.print(f"Hint: {outcome.hint}", style="yellow", markup=False)
        if verbose and outcome.stack_trace:
            out.print(f"\n{outcome.stack_trace}\n", markup=False, soft_wrap=True)
    elif isinstance(outcome, Crash):
        return await context.crash_reporter().report(
            outcome,
            invocation,
            report_crashes=report_crashes,
            get_version=get_version,
        )
    return outcome


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: list[str] | None = None,
    *,
    context: HarnessContext | None = None,
) -> int:
    """Run the tool CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    context:
        Pre-built collaborators; tests pass one with a recording exit
        primitive.

    Returns
    -------
    int
        OS process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    verbose = any(arg in VERBOSE_FLAGS for arg in args)
    help_requested = any(arg in HELP_FLAGS for arg in args) or (
        len(args) == 1 and verbose
    )
    doctor_requested = (bool(args) and args[0] == "doctor") or (
        len(args) == 2 and verbose and args[-1] == "doctor"
    )

    settings = context.settings if context is not None else HarnessSettings.from_env()
    configure_logging(verbose=verbose, level=settings.log_level)
    if context is None:
        context = HarnessContext.create(settings)

    return asyncio.run(
        run(
            args,
            default_commands(verbose=verbose),
            context=context,
            mute_command_logging=help_requested or doctor_requested,
            verbose=verbose,
            verbose_help=help_requested and verbose,
        )
    )


# ---------------------------------------------------------------------------
# Script-level entry point
# ---------------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point.

    The shutdown sequence normally terminates the process itself; the
    trailing ``sys.exit`` only matters when it did not.
    """
    try:
        code = main()
    except KeyboardInterrupt:
        console.print("\nAborted by user.", style="yellow")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    sys.exit(code)
