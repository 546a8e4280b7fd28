"""End-to-end tests for the harness entry point (cli/app.py)."""

from __future__ import annotations

import argparse
import asyncio
import re
import sys
from pathlib import Path

import pytest

from flutter_harness.cli.app import main, run
from flutter_harness.cli.commands import Command, default_commands
from flutter_harness.exceptions import ProcessExit, ToolExit


# ---------------------------------------------------------------------------
# Test commands
# ---------------------------------------------------------------------------

class _CrashCommand(Command):
    name = "boom"
    help = "Raise an unexpected error."

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("extra", nargs="*")

    async def run(self, args, context) -> None:
        raise RuntimeError("kaboom")


class _ToolExitCommand(Command):
    name = "fail"
    help = "Abort deliberately."

    def __init__(self, exit_code: int | None = 3, hint: str | None = None) -> None:
        self._exit_code = exit_code
        self._hint = hint

    async def run(self, args, context) -> None:
        raise ToolExit("build failed", exit_code=self._exit_code, hint=self._hint)


class _RecordingCommand(Command):
    name = "record"
    help = "Record parsed arguments."

    def __init__(self) -> None:
        self.seen: list[argparse.Namespace] = []

    async def run(self, args, context) -> None:
        self.seen.append(args)


class _SysExitCommand(Command):
    name = "sysexit"

    def __init__(self, code) -> None:
        self._code = code

    async def run(self, args, context) -> None:
        sys.exit(self._code)


class _ImmediateCommand(Command):
    name = "now"

    async def run(self, args, context) -> None:
        context.shutdown_hooks.add_shutdown_hook(lambda: pytest.fail("hook ran"))
        raise ProcessExit(7, immediate=True)


class _SyncThenAsyncCommand(Command):
    """Fails directly; its background task fails a moment later."""

    name = "sync-first"

    async def run(self, args, context) -> None:
        async def later() -> None:
            await asyncio.sleep(0)
            raise ValueError("second failure")

        context.spawn(later())
        raise RuntimeError("first failure")


class _AsyncThenSyncCommand(Command):
    """Its background task fails first; the command fails afterwards."""

    name = "async-first"

    async def run(self, args, context) -> None:
        async def now() -> None:
            raise RuntimeError("first failure")

        context.spawn(now())
        await asyncio.sleep(0.5)
        raise ValueError("second failure")


def _crash_files(directory: Path) -> list[Path]:
    return sorted(directory.glob("flutter_*.log"))


# ---------------------------------------------------------------------------
# Success and usage
# ---------------------------------------------------------------------------

class TestSuccess:
    def test_doctor_exits_zero(self, make_context, exit_recorder, capsys):
        context = make_context()
        code = asyncio.run(run(["doctor"], default_commands(), context=context))

        assert code == 0
        assert exit_recorder.codes == [0]
        assert "No issues found!" in capsys.readouterr().out

    def test_no_command_prints_help(self, make_context, exit_recorder, capsys):
        code = asyncio.run(run([], default_commands(), context=make_context()))

        assert code == 0
        assert "<command>" in capsys.readouterr().out

    def test_command_event_recorded(self, make_context, telemetry):
        asyncio.run(run(["doctor"], default_commands(), context=make_context()))

        assert telemetry.events == [("command", "doctor")]

    def test_empty_command_list_rejected(self, make_context):
        with pytest.raises(ValueError):
            asyncio.run(run(["doctor"], [], context=make_context()))


class TestUsageFailure:
    def test_unknown_flag_exits_64(self, make_context, exit_recorder, capsys):
        code = asyncio.run(
            run(["--bogus-flag"], default_commands(), context=make_context())
        )

        assert code == 64
        assert exit_recorder.codes == [64]
        err = capsys.readouterr().err
        assert "--bogus-flag" in err
        assert (
            "Run 'flutter -h' (or 'flutter <command> -h') "
            "for available flutter commands and options."
        ) in err

    def test_unknown_command_exits_64(self, make_context, crash_dirs):
        code = asyncio.run(run(["frobnicate"], default_commands(), context=make_context()))

        assert code == 64
        assert _crash_files(crash_dirs[0]) == []


# ---------------------------------------------------------------------------
# Controlled exits
# ---------------------------------------------------------------------------

class TestControlledExit:
    def test_tool_exit_code_propagates(self, make_context, exit_recorder, crash_dirs, capsys):
        code = asyncio.run(
            run(["fail"], [_ToolExitCommand(exit_code=3)], context=make_context())
        )

        assert code == 3
        assert exit_recorder.codes == [3]
        assert "build failed" in capsys.readouterr().err
        assert _crash_files(crash_dirs[0]) == []
        assert _crash_files(crash_dirs[1]) == []

    def test_tool_exit_without_code_is_one(self, make_context):
        code = asyncio.run(
            run(["fail"], [_ToolExitCommand(exit_code=None)], context=make_context())
        )

        assert code == 1

    def test_hint_is_printed(self, make_context, capsys):
        asyncio.run(
            run(
                ["fail"],
                [_ToolExitCommand(hint="Run flutter clean.")],
                context=make_context(),
            )
        )

        assert "Hint: Run flutter clean." in capsys.readouterr().err

    def test_trace_only_when_verbose(self, make_context, capsys):
        asyncio.run(run(["fail"], [_ToolExitCommand()], context=make_context()))
        assert "Traceback" not in capsys.readouterr().err

    def test_trace_shown_when_verbose(self, make_context, capsys):
        asyncio.run(
            run(["fail"], [_ToolExitCommand()], context=make_context(), verbose=True)
        )
        assert "Traceback" in capsys.readouterr().err

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [(None, 0), (5, 5), ("bad input", 1)],
    )
    def test_sys_exit_in_command(self, make_context, exit_recorder, payload, expected):
        code = asyncio.run(
            run(["sysexit"], [_SysExitCommand(payload)], context=make_context())
        )

        assert code == expected
        assert exit_recorder.codes == [expected]

    def test_immediate_exit_skips_shutdown(self, make_context, telemetry, exit_recorder):
        context = make_context()
        code = asyncio.run(run(["now"], [_ImmediateCommand()], context=context))

        assert code == 7
        assert exit_recorder.codes == [7]
        assert telemetry.log == []
        assert not context.shutdown_hooks.ran


# ---------------------------------------------------------------------------
# Crashes
# ---------------------------------------------------------------------------

class TestCrash:
    def test_crash_writes_one_report(self, make_context, exit_recorder, crash_dirs, capsys):
        code = asyncio.run(
            run(["boom", "a", "b"], [_CrashCommand()], context=make_context())
        )

        assert code == 1
        assert exit_recorder.codes == [1]

        files = _crash_files(crash_dirs[0])
        assert len(files) == 1
        assert re.fullmatch(r"flutter_\d\d\.log", files[0].name)

        text = files[0].read_text(encoding="utf-8")
        assert "flutter boom a b" in text
        assert "RuntimeError: kaboom" in text
        assert "## flutter doctor" in text

        captured = capsys.readouterr()
        assert 'Oops; flutter has exited unexpectedly: "kaboom".' in captured.err
        assert f"A crash report has been written to {files[0]}." in captured.err
        assert "/new?" in captured.out

    def test_second_crash_gets_next_number(self, make_context, crash_dirs):
        asyncio.run(run(["boom"], [_CrashCommand()], context=make_context()))
        asyncio.run(run(["boom"], [_CrashCommand()], context=make_context()))

        names = [path.name for path in _crash_files(crash_dirs[0])]
        assert names == ["flutter_01.log", "flutter_02.log"]

    def test_crash_sent_remotely(self, make_context, crash_sender):
        asyncio.run(
            run(
                ["boom"],
                [_CrashCommand()],
                context=make_context(),
                flutter_version="9.9.9",
            )
        )

        assert len(crash_sender.reports) == 1
        report = crash_sender.reports[0]
        assert isinstance(report["error"], RuntimeError)
        assert report["version"] == "9.9.9"
        assert report["command"] == "boom"

    def test_bot_skips_remote_but_writes_local(self, make_context, crash_sender, crash_dirs, capsys):
        context = make_context(environ={"CI": "true"})
        code = asyncio.run(run(["boom"], [_CrashCommand()], context=context))

        assert code == 1
        assert crash_sender.reports == []
        assert len(_crash_files(crash_dirs[0])) == 1
        assert "Traceback" in capsys.readouterr().err

    def test_sync_failure_wins_over_later_async(self, make_context, crash_dirs):
        code = asyncio.run(
            run(["sync-first"], [_SyncThenAsyncCommand()], context=make_context())
        )

        assert code == 1
        files = _crash_files(crash_dirs[0])
        assert len(files) == 1
        text = files[0].read_text(encoding="utf-8")
        assert "first failure" in text
        assert "second failure" not in text

    def test_async_failure_wins_over_later_sync(self, make_context, crash_dirs, exit_recorder):
        code = asyncio.run(
            run(["async-first"], [_AsyncThenSyncCommand()], context=make_context())
        )

        assert code == 1
        assert exit_recorder.codes == [1]
        files = _crash_files(crash_dirs[0])
        assert len(files) == 1
        text = files[0].read_text(encoding="utf-8")
        assert "first failure" in text
        assert "second failure" not in text


# ---------------------------------------------------------------------------
# Verbose flag handling
# ---------------------------------------------------------------------------

class TestMuteCommandLogging:
    def test_verbose_flags_stripped(self, make_context):
        command = _RecordingCommand()
        asyncio.run(
            run(
                ["record", "-v", "--verbose"],
                [command],
                context=make_context(),
                mute_command_logging=True,
            )
        )

        assert len(command.seen) == 1
        assert command.seen[0].verbose is False

    def test_verbose_flags_kept_by_default(self, make_context):
        command = _RecordingCommand()
        asyncio.run(run(["record", "-v"], [command], context=make_context()))

        assert command.seen[0].verbose is True


class TestMain:
    def test_main_runs_doctor(self, make_context, exit_recorder):
        code = main(["doctor"], context=make_context())

        assert code == 0
        assert exit_recorder.codes == [0]

    def test_main_verbose_doctor(self, make_context, capsys):
        code = main(["-v", "doctor"], context=make_context())

        assert code == 0
        assert "Value" in capsys.readouterr().out

    def test_main_usage_error(self, make_context, exit_recorder):
        assert main(["--bogus-flag"], context=make_context()) == 64
        assert exit_recorder.codes == [64]
