"""Configuration and settings.

Settings are read once from the environment (and a ``.env`` file, when
present) into an immutable :class:`HarnessSettings` that is passed
explicitly to everything that needs it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "FLUTTER_HARNESS_"

DEFAULT_TOOL_NAME = "flutter"
DEFAULT_ISSUES_URL = "https://github.com/flutter/flutter/issues"
DEFAULT_BUG_REPORT_GUIDE_URL = "https://flutter.dev/docs/resources/bug-reports"
DEFAULT_LOG_LEVEL = "WARNING"


def _flag(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True, slots=True)
class HarnessSettings:
    """Runtime settings for one harness invocation."""

    tool_name: str = DEFAULT_TOOL_NAME
    """Executable name used in crash reports and the usage hint."""

    crash_report_dir: Path | None = None
    """Preferred directory for crash reports.  ``None`` means the CWD."""

    crash_report_url: str | None = None
    """Remote crash-collection endpoint.  ``None`` disables remote reports."""

    telemetry_enabled: bool = True

    telemetry_url: str | None = None
    """Endpoint queued telemetry events are posted to at shutdown."""

    state_dir: Path = Path.home() / ".flutter_harness"
    """Where per-user state (the welcome marker) lives."""

    issues_url: str = DEFAULT_ISSUES_URL
    bug_report_guide_url: str = DEFAULT_BUG_REPORT_GUIDE_URL
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        dotenv: bool = True,
    ) -> HarnessSettings:
        """Build settings from ``FLUTTER_HARNESS_*`` environment variables."""
        if dotenv:
            load_dotenv()
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        crash_dir = _optional(get("CRASH_DIR"))
        state_dir = _optional(get("STATE_DIR"))
        return cls(
            tool_name=_optional(get("TOOL_NAME")) or DEFAULT_TOOL_NAME,
            crash_report_dir=Path(crash_dir).expanduser() if crash_dir else None,
            crash_report_url=_optional(get("CRASH_URL")),
            telemetry_enabled=_flag(get("TELEMETRY"), True),
            telemetry_url=_optional(get("TELEMETRY_URL")),
            state_dir=(
                Path(state_dir).expanduser()
                if state_dir
                else Path.home() / ".flutter_harness"
            ),
            issues_url=_optional(get("ISSUES_URL")) or DEFAULT_ISSUES_URL,
            bug_report_guide_url=(
                _optional(get("BUG_GUIDE_URL")) or DEFAULT_BUG_REPORT_GUIDE_URL
            ),
            log_level=(_optional(get("LOG_LEVEL")) or DEFAULT_LOG_LEVEL).upper(),
        )
