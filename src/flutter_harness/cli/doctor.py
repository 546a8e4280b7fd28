"""``flutter doctor`` — environment diagnostics.

Gathers system information and renders a Rich table summarising
whether the runtime environment is healthy.  The same output is
captured, colorless, into every crash report.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich when available.
"""

from __future__ import annotations

import os
import platform
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from flutter_harness.cli.console import _ConsoleProxy, status_console
from flutter_harness.config import HarnessSettings
from flutter_harness.infra.bot_detector import is_running_on_bot
from flutter_harness.version import get_version_string

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    release = platform.release()
    machine = platform.machine()
    value = f"{system_display} {release} ({machine})"
    return "OS", value, "[green]OK[/green]"


def _tool_version_check(tool_name: str) -> Check:
    """Return (label, value, status) for the tool version row."""
    return tool_name, get_version_string(), "[green]OK[/green]"


def _crash_dir_check(directory: Path) -> Check:
    """Crash reports need a writable directory; the temp dir is the fallback."""
    if directory.is_dir() and os.access(directory, os.W_OK):
        return "Crash reports", str(directory), "[green]OK[/green]"
    return "Crash reports", f"{directory} (not writable)", "[yellow]WARN[/yellow]"


def _telemetry_check(enabled: bool) -> Check:
    return "Telemetry", "enabled" if enabled else "disabled", "[green]OK[/green]"


def _ci_check(environ: Mapping[str, str] | None) -> Check:
    on_bot = is_running_on_bot(environ)
    return "CI", "detected" if on_bot else "not detected", "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


# ---------------------------------------------------------------------------
# Doctor
# ---------------------------------------------------------------------------

class Doctor:
    """Collects and renders the diagnostic checks.

    Parameters
    ----------
    settings:
        Harness settings; supplies the tool name, crash directory and
        telemetry state.
    environ:
        Environment used for CI detection.  Defaults to ``os.environ``.
    """

    def __init__(
        self,
        settings: HarnessSettings | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._settings = settings or HarnessSettings()
        self._environ = environ

    def checks(self) -> list[Check]:
        settings = self._settings
        return [
            _tool_version_check(settings.tool_name),
            _python_version_check(),
            _os_check(),
            _crash_dir_check(settings.crash_report_dir or Path.cwd()),
            _telemetry_check(settings.telemetry_enabled),
            _ci_check(self._environ),
        ]

    async def diagnose(
        self,
        *,
        verbose: bool = True,
        show_color: bool = True,
        console: Any = None,
    ) -> bool:
        """Run every check and render the summary.

        Returns
        -------
        bool
            ``True`` when no critical check failed.
        """
        if console is None:
            console = (
                status_console
                if show_color
                else _ConsoleProxy(stderr=False, no_color=True)
            )

        checks = self.checks()
        healthy = not any("FAIL" in status for _, _, status in checks)

        try:
            from rich.table import Table
        except ModuleNotFoundError:
            self._render_plain(console, checks, verbose=verbose)
        else:
            title = f"{self._settings.tool_name} doctor"
            table = Table(
                title=title,
                show_header=True,
                header_style="bold cyan",
                border_style="dim",
            )
            table.add_column("Component", style="bold", min_width=12)
            if verbose:
                table.add_column("Value", min_width=20)
            table.add_column("Status", justify="center", min_width=8)
            for label, value, status in checks:
                if verbose:
                    table.add_row(label, value, status)
                else:
                    table.add_row(label, status)
            console.print(table)

        if healthy:
            console.print("No issues found!", style="bold green")
        else:
            console.print("Some checks failed.", style="bold red")
        return healthy

    def _render_plain(
        self,
        console: Any,
        checks: list[Check],
        *,
        verbose: bool,
    ) -> None:
        """Render doctor output without Rich."""
        console.print(f"{self._settings.tool_name} doctor")
        console.print("=" * 56)
        for label, value, status in checks:
            plain_status = _status_plain(status)
            if verbose:
                console.print(f"{label:<14} {value:<32} {plain_status:<8}")
            else:
                console.print(f"{label:<14} {plain_status:<8}")
        console.print("-" * 56)
