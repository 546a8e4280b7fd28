"""The explicitly passed harness context.

Everything that would otherwise be a process-wide singleton — telemetry,
the shutdown hook registry, the crash file system — hangs off one
:class:`HarnessContext`.  A context serves exactly one invocation: its
failure boundary runs once and its shutdown sequence runs once.  Tests
build a fresh context per case.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Coroutine, Mapping
from dataclasses import dataclass, field
from typing import Any

from flutter_harness.cli.console import console, status_console
from flutter_harness.cli.crash_reporter import CrashReporter
from flutter_harness.cli.doctor import Doctor
from flutter_harness.config import HarnessSettings
from flutter_harness.core.boundary import FailureBoundary
from flutter_harness.core.protocols import (
    CrashFileSystem,
    CrashReportSender as CrashReportSenderProtocol,
    Diagnostics,
    IssueTemplates,
    TelemetryClient,
)
from flutter_harness.core.shutdown import (
    TELEMETRY_FLUSH_BUDGET,
    ExitProcess,
    ShutdownHooks,
    ShutdownSequencer,
)
from flutter_harness.infra.bot_detector import is_running_on_bot
from flutter_harness.infra.crash_fs import LocalCrashFileSystem
from flutter_harness.infra.crash_sender import CrashReportSender
from flutter_harness.infra.issue_template import IssueTemplateCreator
from flutter_harness.infra.telemetry import Telemetry


@dataclass
class HarnessContext:
    """Collaborators for one harness invocation."""

    settings: HarnessSettings
    telemetry: TelemetryClient
    shutdown_hooks: ShutdownHooks
    sequencer: ShutdownSequencer
    crash_file_system: CrashFileSystem
    crash_sender: CrashReportSenderProtocol
    issue_templates: IssueTemplates
    doctor: Diagnostics
    environ: Mapping[str, str] | None = None
    boundary: FailureBoundary = field(default_factory=FailureBoundary)
    console: Any = console
    status_console: Any = status_console

    @classmethod
    def create(
        cls,
        settings: HarnessSettings | None = None,
        *,
        exit_process: ExitProcess = sys.exit,
        environ: Mapping[str, str] | None = None,
        telemetry: TelemetryClient | None = None,
        shutdown_hooks: ShutdownHooks | None = None,
        crash_file_system: CrashFileSystem | None = None,
        crash_sender: CrashReportSenderProtocol | None = None,
        issue_templates: IssueTemplates | None = None,
        doctor: Diagnostics | None = None,
        flush_budget: float = TELEMETRY_FLUSH_BUDGET,
    ) -> HarnessContext:
        """Build a context, defaulting every collaborator from *settings*."""
        settings = settings or HarnessSettings()
        on_bot = is_running_on_bot(environ)

        if telemetry is None:
            telemetry = Telemetry(
                enabled=settings.telemetry_enabled,
                state_dir=settings.state_dir,
                endpoint=settings.telemetry_url,
                suppress_welcome=on_bot,
                emit=lambda message: console.print(message, markup=False),
            )
        hooks = shutdown_hooks or ShutdownHooks()

        return cls(
            settings=settings,
            telemetry=telemetry,
            shutdown_hooks=hooks,
            sequencer=ShutdownSequencer(
                telemetry,
                hooks,
                exit_process=exit_process,
                flush_budget=flush_budget,
            ),
            crash_file_system=crash_file_system
            or LocalCrashFileSystem(current_directory=settings.crash_report_dir),
            crash_sender=crash_sender
            or CrashReportSender(settings.crash_report_url, product=settings.tool_name),
            issue_templates=issue_templates or IssueTemplateCreator(settings.issues_url),
            doctor=doctor or Doctor(settings, environ),
            environ=environ,
        )

    def crash_reporter(self) -> CrashReporter:
        return CrashReporter(
            settings=self.settings,
            file_system=self.crash_file_system,
            sender=self.crash_sender,
            telemetry=self.telemetry,
            issue_templates=self.issue_templates,
            doctor=self.doctor,
            error_console=self.console,
            out_console=self.status_console,
        )

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        *,
        name: str | None = None,
    ) -> asyncio.Task[Any]:
        """Start background work whose failure the harness will report."""
        return self.boundary.spawn(coro, name=name)
