"""Protocols (interfaces) for the harness's external collaborators.

The core depends only on these contracts.  Concrete implementations
live in :mod:`flutter_harness.infra` and :mod:`flutter_harness.cli`;
tests substitute fakes that satisfy them structurally.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol


class TelemetryClient(Protocol):
    """Contract for the usage/analytics accumulator."""

    @property
    def enabled(self) -> bool:
        """Whether telemetry collection is on for this run."""
        ...  # pragma: no cover

    def send_event(self, category: str, action: str, **parameters: Any) -> None:
        """Queue a usage event."""
        ...  # pragma: no cover

    def send_exception(self, error: BaseException) -> None:
        """Queue an exception event."""
        ...  # pragma: no cover

    async def ensure_sent(self) -> None:
        """Flush queued events.  Callers bound the wait themselves."""
        ...  # pragma: no cover

    def print_welcome(self) -> None:
        """Show the first-run notice, at most once."""
        ...  # pragma: no cover


class CrashReportSender(Protocol):
    """Contract for the remote crash-collection service.

    Implementations must never raise: a failed upload is logged and
    dropped so that it cannot mask the crash being reported.
    """

    async def send_report(
        self,
        *,
        error: BaseException,
        stack_trace: str,
        get_version: Callable[[], str],
        command: str,
    ) -> None:
        ...  # pragma: no cover


class CrashFileSystem(Protocol):
    """File access used only for writing crash reports.

    Kept separate from any other file-system layer in the process so a
    report can still be written when that layer is in a bad state.
    """

    @property
    def current_directory(self) -> Path:
        ...  # pragma: no cover

    @property
    def system_temp_directory(self) -> Path:
        ...  # pragma: no cover

    def unique_file(self, directory: Path, base_name: str, extension: str) -> Path:
        """Return an unused ``<base_name>_NN.<extension>`` path in *directory*."""
        ...  # pragma: no cover

    def write_text(self, path: Path, text: str) -> None:
        """Write *text* to *path*, raising :class:`OSError` on failure."""
        ...  # pragma: no cover


class IssueTemplates(Protocol):
    """Contract for building issue-tracker URLs for a crash."""

    def similar_issues_url(self, message: str) -> str:
        ...  # pragma: no cover

    def new_issue_url(
        self,
        command: str,
        message: str,
        exception: str,
        stack_trace: str,
        doctor_text: str,
    ) -> str:
        ...  # pragma: no cover


class Diagnostics(Protocol):
    """Contract for the environment diagnostics ("doctor") collaborator."""

    async def diagnose(
        self,
        *,
        verbose: bool = True,
        show_color: bool = True,
        console: Any = None,
    ) -> bool:
        """Render diagnostics to *console*; return ``True`` when healthy."""
        ...  # pragma: no cover


ShutdownHook = Callable[[], Any]
"""A cleanup callback; may be a plain function or return an awaitable."""
