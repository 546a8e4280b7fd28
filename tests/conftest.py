"""Shared pytest fixtures and configuration for the flutter-harness test suite.

Guidelines
----------
* No internet access in any test.
* The exit primitive is always injected — no test terminates the runner.
* Crash reports are written under ``tmp_path`` only.
* Tests must not depend on OS state (CI variables included).
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from flutter_harness.cli.context import HarnessContext
from flutter_harness.config import HarnessSettings
from flutter_harness.infra.crash_fs import LocalCrashFileSystem
from flutter_harness.utils.logger import configure_logging


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class ExitRecorder:
    """Exit primitive that records codes instead of terminating."""

    def __init__(self, log: list[str] | None = None) -> None:
        self.codes: list[int] = []
        self._log = log

    def __call__(self, code: int) -> None:
        self.codes.append(code)
        if self._log is not None:
            self._log.append(f"exit:{code}")


class FakeTelemetry:
    """In-memory :class:`TelemetryClient` that records every call."""

    def __init__(
        self,
        *,
        enabled: bool = True,
        flush_delay: float = 0.0,
        log: list[str] | None = None,
    ) -> None:
        self._enabled = enabled
        self.flush_delay = flush_delay
        self.log: list[str] = log if log is not None else []
        self.events: list[tuple[str, str]] = []
        self.exceptions: list[BaseException] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    def send_event(self, category: str, action: str, **parameters: Any) -> None:
        self.events.append((category, action))

    def send_exception(self, error: BaseException) -> None:
        self.exceptions.append(error)

    async def ensure_sent(self) -> None:
        self.log.append("flush")
        if self.flush_delay:
            await asyncio.sleep(self.flush_delay)

    def print_welcome(self) -> None:
        self.log.append("welcome")


class FakeCrashSender:
    """Records crash reports instead of uploading them."""

    def __init__(self) -> None:
        self.reports: list[dict[str, Any]] = []

    async def send_report(
        self,
        *,
        error: BaseException,
        stack_trace: str,
        get_version: Callable[[], str],
        command: str,
    ) -> None:
        self.reports.append(
            {
                "error": error,
                "stack_trace": stack_trace,
                "version": get_version(),
                "command": command,
            }
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo any verbose logging set up by a test that called ``main()``."""
    yield
    configure_logging()


@pytest.fixture
def crash_dirs(tmp_path: Path) -> tuple[Path, Path]:
    """(primary, fallback) crash-report directories, both created."""
    primary = tmp_path / "cwd"
    fallback = tmp_path / "tmp"
    primary.mkdir()
    fallback.mkdir()
    return primary, fallback


@pytest.fixture
def settings(tmp_path: Path, crash_dirs: tuple[Path, Path]) -> HarnessSettings:
    return HarnessSettings(
        crash_report_dir=crash_dirs[0],
        state_dir=tmp_path / "state",
        telemetry_enabled=False,
    )


@pytest.fixture
def exit_recorder() -> ExitRecorder:
    return ExitRecorder()


@pytest.fixture
def telemetry() -> FakeTelemetry:
    return FakeTelemetry(enabled=False)


@pytest.fixture
def crash_sender() -> FakeCrashSender:
    return FakeCrashSender()


@pytest.fixture
def make_context(
    settings: HarnessSettings,
    crash_dirs: tuple[Path, Path],
    exit_recorder: ExitRecorder,
    telemetry: FakeTelemetry,
    crash_sender: FakeCrashSender,
) -> Callable[..., HarnessContext]:
    """Factory for a fully isolated :class:`HarnessContext`."""

    def _make(**overrides: Any) -> HarnessContext:
        options: dict[str, Any] = {
            "exit_process": exit_recorder,
            "environ": {},
            "telemetry": telemetry,
            "crash_file_system": LocalCrashFileSystem(*crash_dirs),
            "crash_sender": crash_sender,
        }
        options.update(overrides)
        return HarnessContext.create(settings, **options)

    return _make


@pytest.fixture
def fake_telemetry_class() -> type[FakeTelemetry]:
    return FakeTelemetry


@pytest.fixture
def exit_recorder_class() -> type[ExitRecorder]:
    return ExitRecorder
