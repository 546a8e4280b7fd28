"""Sub-command base class and the built-in commands.

A command declares its name and arguments and implements an async
:meth:`Command.run`.  Commands signal expected failures by raising
:class:`~flutter_harness.exceptions.ToolExit`; anything else that
escapes is reported as a crash.
"""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING

from flutter_harness.cli import exit_codes
from flutter_harness.exceptions import ToolExit
from flutter_harness.version import get_version_string

if TYPE_CHECKING:
    from flutter_harness.cli.context import HarnessContext


class Command:
    """Base class for sub-commands."""

    name: str = ""
    help: str = ""
    hidden: bool = False

    def configure(self, parser: argparse.ArgumentParser) -> None:
        """Add command-specific arguments to *parser*."""

    async def run(self, args: argparse.Namespace, context: HarnessContext) -> None:
        raise NotImplementedError


class DoctorCommand(Command):
    """Show information about the installed tooling."""

    name = "doctor"
    help = "Show information about the installed tooling."

    def __init__(self, *, verbose: bool = False) -> None:
        # ``-v`` is stripped from the invocation for doctor runs, so the
        # flag arrives through the constructor instead.
        self._verbose = verbose

    async def run(self, args: argparse.Namespace, context: HarnessContext) -> None:
        verbose = self._verbose or bool(getattr(args, "verbose", False))
        healthy = await context.doctor.diagnose(verbose=verbose, show_color=True)
        if not healthy:
            raise ToolExit(exit_code=exit_codes.GENERAL_ERROR)


class VersionCommand(Command):
    """Print the tool version."""

    name = "version"
    help = "List the tool version."

    async def run(self, args: argparse.Namespace, context: HarnessContext) -> None:
        context.status_console.print(
            f"{context.settings.tool_name} {get_version_string()}",
            markup=False,
        )


def default_commands(*, verbose: bool = False) -> list[Command]:
    """Return the commands every harness invocation registers."""
    return [
        DoctorCommand(verbose=verbose),
        VersionCommand(),
    ]
