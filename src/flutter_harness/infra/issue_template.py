"""Infrastructure: issue-tracker URLs for crash reports.

Builds a "search similar issues" URL and a "new issue" URL pre-filled
with a bug template.  Pure string building — no network access.
"""

from __future__ import annotations

from urllib.parse import quote_plus, urlencode

from flutter_harness.config import DEFAULT_ISSUES_URL

MAX_TITLE_LENGTH = 200
MAX_STACK_TRACE_LENGTH = 4000
CRASH_LABELS = ("tool", "severe: crash")


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class IssueTemplateCreator:
    """Issue URL builder for a GitHub-style tracker.

    Parameters
    ----------
    issues_url:
        Base issues URL, e.g. ``https://github.com/flutter/flutter/issues``.
    """

    def __init__(self, issues_url: str = DEFAULT_ISSUES_URL) -> None:
        self._issues_url = issues_url.rstrip("/")

    def similar_issues_url(self, message: str) -> str:
        """Return a tracker search URL for issues mentioning *message*."""
        query = quote_plus(f"is:issue {message}")
        return f"{self._issues_url}?q={query}"

    def new_issue_url(
        self,
        command: str,
        message: str,
        exception: str,
        stack_trace: str,
        doctor_text: str,
    ) -> str:
        """Return a new-issue URL pre-filled with the crash template."""
        title = _truncate(f"[tool_crash] {exception}", MAX_TITLE_LENGTH)
        body = self._issue_body(
            command=command,
            message=message,
            exception=exception,
            stack_trace=_truncate(stack_trace.rstrip(), MAX_STACK_TRACE_LENGTH),
            doctor_text=doctor_text.rstrip(),
        )
        query = urlencode(
            {
                "title": title,
                "body": body,
                "labels": ",".join(CRASH_LABELS),
            }
        )
        return f"{self._issues_url}/new?{query}"

    @staticmethod
    def _issue_body(
        *,
        command: str,
        message: str,
        exception: str,
        stack_trace: str,
        doctor_text: str,
    ) -> str:
        return "\n".join(
            (
                "## Command",
                "```",
                command,
                "```",
                "",
                "## Steps to Reproduce",
                "1. ...",
                "2. ...",
                "3. ...",
                "",
                "## Logs",
                exception,
                "```",
                stack_trace,
                "```",
                "```",
                doctor_text,
                "```",
                "",
                "## Error message",
                message,
                "",
            )
        )
