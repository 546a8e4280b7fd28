"""Crash report text and descriptor.

Pure string building — the CLI layer decides where the text goes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

CRASH_REPORT_EXTENSION = "log"


@dataclass(frozen=True, slots=True)
class CrashReportFile:
    """Where a crash report was (or was meant to be) written."""

    path: Path | None
    written: bool = True
    """``False`` when both disk writes failed and the text went to stderr."""


def crash_command(tool_name: str, invocation: Sequence[str]) -> str:
    """Reconstruct the command line, e.g. ``flutter run -d chrome``."""
    return " ".join((tool_name, *invocation))


def crash_exception(error: BaseException) -> str:
    """Return ``"<TypeName>: <message>"`` for *error*."""
    return f"{type(error).__name__}: {error}"


def build_crash_report(
    *,
    tool_name: str,
    invocation: Sequence[str],
    error: BaseException,
    stack_trace: str,
    doctor_text: str,
    issues_url: str,
) -> str:
    """Assemble the markdown crash report document."""
    title = tool_name[:1].upper() + tool_name[1:]
    lines = [
        f"{title} crash report; please file at {issues_url}.",
        "",
        "## command",
        "",
        crash_command(tool_name, invocation),
        "",
        "## exception",
        "",
        crash_exception(error),
        "",
        f"```\n{_with_newline(stack_trace)}```",
        "",
        f"## {tool_name} doctor",
        "",
        f"```\n{_with_newline(doctor_text)}```",
    ]
    return "\n".join(lines) + "\n"


def _with_newline(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"
