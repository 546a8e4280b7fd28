"""Crash reporting — the user-facing half of the crash path.

Invoked only for :class:`~flutter_harness.core.outcomes.Crash`.  Sends
the remote report (unless crash reporting is off), writes the local
report with a temp-directory fallback, and prints where to find it and
how to file an issue.

If building or printing the report itself fails, the reporter gives up
and returns :class:`~flutter_harness.core.outcomes.ImmediateExit` so
that nothing tries to report the secondary failure in turn.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from flutter_harness.cli import exit_codes
from flutter_harness.cli.console import buffer_console, console, status_console
from flutter_harness.config import HarnessSettings
from flutter_harness.core.classifier import format_stack_trace
from flutter_harness.core.crash_report import (
    CRASH_REPORT_EXTENSION,
    CrashReportFile,
    build_crash_report,
    crash_command,
    crash_exception,
)
from flutter_harness.core.outcomes import Crash, ImmediateExit, Outcome
from flutter_harness.core.protocols import (
    CrashFileSystem,
    CrashReportSender,
    Diagnostics,
    IssueTemplates,
    TelemetryClient,
)
from flutter_harness.utils.logger import get_logger

logger = get_logger(__name__)


class CrashReporter:
    """Reports one crash.  All collaborators are injected."""

    def __init__(
        self,
        *,
        settings: HarnessSettings,
        file_system: CrashFileSystem,
        sender: CrashReportSender,
        telemetry: TelemetryClient,
        issue_templates: IssueTemplates,
        doctor: Diagnostics,
        error_console: Any = console,
        out_console: Any = status_console,
    ) -> None:
        self._settings = settings
        self._file_system = file_system
        self._sender = sender
        self._telemetry = telemetry
        self._issue_templates = issue_templates
        self._doctor = doctor
        self._console = error_console
        self._status = out_console

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def report(
        self,
        crash: Crash,
        invocation: Sequence[str],
        *,
        report_crashes: bool,
        get_version: Callable[[], str],
    ) -> Outcome:
        """Report *crash* and return the outcome to exit with.

        Returns *crash* itself (exit code 1) normally, or
        ``ImmediateExit(1)`` when the report could not be produced.
        """
        error, stack_trace = crash.error, crash.stack_trace
        tool = self._settings.tool_name

        try:
            self._console.print()

            if report_crashes:
                self._telemetry.send_exception(error)
                await self._send_remote(crash, invocation, get_version)
            else:
                # Unattended run: keep the trace in the CI log.
                self._console.print(str(error), markup=False, soft_wrap=True)
                self._console.print(stack_trace, markup=False, soft_wrap=True)

            error_string = str(error)
            self._console.print(
                f'Oops; {tool} has exited unexpectedly: "{error_string}".',
                markup=False,
                soft_wrap=True,
            )
            await self.inform_user(invocation, error, stack_trace, error_string)
        except Exception as secondary:
            print(
                "Unable to generate crash report due to secondary error: "
                f"{secondary}\n"
                f"please let us know at {self._settings.issues_url}.",
                file=sys.stderr,
            )
            return ImmediateExit(code=exit_codes.GENERAL_ERROR)

        return crash

    async def inform_user(
        self,
        invocation: Sequence[str],
        error: BaseException,
        stack_trace: str,
        error_string: str,
    ) -> CrashReportFile:
        """Write the local report and print filing guidance."""
        doctor_text = await self.doctor_text()
        report_file = self.create_local_report(
            invocation, error, stack_trace, doctor_text,
        )

        if report_file.written:
            self._console.print(
                f"A crash report has been written to {report_file.path}.",
                markup=False,
                soft_wrap=True,
            )
        else:
            self._console.print(
                "The crash report could not be saved; its contents are shown above.",
                soft_wrap=True,
            )

        templates = self._issue_templates
        title = self._settings.tool_name.capitalize()
        self._emphasis("This crash may already be reported. Check GitHub for similar crashes.")
        self._url(templates.similar_issues_url(error_string))
        self._emphasis(
            f"To report your crash to the {title} team, "
            "first read the guide to filing a bug."
        )
        self._url(self._settings.bug_report_guide_url)
        self._emphasis(
            "Create a new GitHub issue by pasting this link into your browser "
            "and completing the issue template. Thank you!"
        )
        self._url(
            templates.new_issue_url(
                crash_command(self._settings.tool_name, invocation),
                error_string,
                crash_exception(error),
                stack_trace,
                doctor_text,
            )
        )
        return report_file

    def create_local_report(
        self,
        invocation: Sequence[str],
        error: BaseException,
        stack_trace: str,
        doctor_text: str,
    ) -> CrashReportFile:
        """Persist the crash report, falling back to the temp directory.

        When neither location is writable the report is printed to
        stderr and the returned descriptor has ``written=False``.
        """
        text = build_crash_report(
            tool_name=self._settings.tool_name,
            invocation=invocation,
            error=error,
            stack_trace=stack_trace,
            doctor_text=doctor_text,
            issues_url=self._settings.issues_url,
        )
        fs = self._file_system
        base_name = self._settings.tool_name

        try:
            path = fs.unique_file(fs.current_directory, base_name, CRASH_REPORT_EXTENSION)
            fs.write_text(path, text)
            return CrashReportFile(path=path)
        except OSError as exc:
            logger.debug("Primary crash report write failed", error=repr(exc))

        path: Path | None = None
        try:
            path = fs.unique_file(fs.system_temp_directory, base_name, CRASH_REPORT_EXTENSION)
            fs.write_text(path, text)
        except OSError as exc:
            self._console.print(
                f"Could not write crash report to disk: {exc}",
                markup=False,
                soft_wrap=True,
            )
            self._console.print(text, markup=False, soft_wrap=True)
            return CrashReportFile(path=path, written=False)
        return CrashReportFile(path=path)

    async def doctor_text(self) -> str:
        """Capture verbose, colorless diagnostics output.

        A failing diagnostics run is described in the returned text
        rather than raised.
        """
        try:
            sink, buffer = buffer_console()
            await self._doctor.diagnose(verbose=True, show_color=False, console=sink)
            return buffer.getvalue()
        except Exception as exc:
            trace = format_stack_trace(exc).strip()
            return f"encountered exception: {exc}\n\n{trace}\n"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send_remote(
        self,
        crash: Crash,
        invocation: Sequence[str],
        get_version: Callable[[], str],
    ) -> None:
        try:
            await self._sender.send_report(
                error=crash.error,
                stack_trace=crash.stack_trace,
                get_version=get_version,
                command=" ".join(invocation),
            )
        except Exception as exc:
            logger.debug("Crash report upload raised", error=repr(exc))

    def _emphasis(self, text: str) -> None:
        self._status.print(text, style="bold", markup=False, soft_wrap=True)

    def _url(self, url: str) -> None:
        self._status.print(f"{url}\n", markup=False, soft_wrap=True)
