"""Command registry and argument parsing.

Wraps :mod:`argparse` so that a rejected command line raises
:class:`~flutter_harness.exceptions.UsageError` instead of printing and
calling ``sys.exit(2)``; the harness turns that into exit code 64.
"""

from __future__ import annotations

import argparse
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, NoReturn

from flutter_harness.cli.commands import Command
from flutter_harness.exceptions import UsageError
from flutter_harness.version import get_version_string

if TYPE_CHECKING:
    from flutter_harness.cli.context import HarnessContext


class _HarnessArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises :class:`UsageError` on bad input."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message, usage=self.format_usage())


class ToolCommandRunner:
    """Registry of sub-commands plus the top-level parser.

    Parameters
    ----------
    prog:
        Program name shown in usage text.
    verbose_help:
        Also list hidden commands in ``--help`` output.
    """

    def __init__(
        self,
        *,
        prog: str = "flutter",
        verbose_help: bool = False,
        commands: Iterable[Command] = (),
    ) -> None:
        self._prog = prog
        self._verbose_help = verbose_help
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.add_command(command)

    @property
    def commands(self) -> dict[str, Command]:
        return dict(self._commands)

    def add_command(self, command: Command) -> None:
        """Register *command*; names must be unique."""
        if not command.name:
            raise ValueError(f"{type(command).__name__} has no name.")
        if command.name in self._commands:
            raise ValueError(f"Command {command.name!r} is already registered.")
        self._commands[command.name] = command

    def build_parser(self) -> argparse.ArgumentParser:
        """Construct the top-level parser with one sub-parser per command."""
        parser = _HarnessArgumentParser(
            prog=self._prog,
            description=f"Manage your {self._prog} tooling.",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Noisy logging, including all shell commands executed.",
        )
        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {get_version_string()}",
        )
        subparsers = parser.add_subparsers(dest="command", metavar="<command>")
        for command in self._commands.values():
            # Sub-parsers added without ``help`` are left out of the listing.
            listing = {}
            if self._verbose_help or not command.hidden:
                listing["help"] = command.help
            sub = subparsers.add_parser(
                command.name,
                description=command.help,
                **listing,
            )
            sub.add_argument(
                "-v",
                "--verbose",
                action="store_true",
                default=argparse.SUPPRESS,
                help=argparse.SUPPRESS,
            )
            command.configure(sub)
        return parser

    async def run(self, invocation: Sequence[str], context: HarnessContext) -> None:
        """Parse *invocation* and run the selected command.

        Raises
        ------
        UsageError
            When the command line is rejected.
        """
        if not self._commands:
            raise ValueError("No commands registered.")

        parser = self.build_parser()
        args = parser.parse_args(list(invocation))

        if args.command is None:
            parser.print_help()
            return

        command = self._commands[args.command]
        context.telemetry.send_event("command", command.name)
        await command.run(args, context)
