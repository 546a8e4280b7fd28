"""Tests for the failure classifier and outcome exit codes."""

from __future__ import annotations

import pytest

from flutter_harness.core.classifier import classify, format_stack_trace
from flutter_harness.core.outcomes import (
    ControlledExit,
    Crash,
    ImmediateExit,
    Success,
    UsageFailure,
)
from flutter_harness.exceptions import ProcessExit, ToolExit, UsageError


def _raised(error: BaseException) -> BaseException:
    try:
        raise error
    except BaseException as exc:
        return exc


class TestClassify:
    def test_usage_error(self):
        outcome = classify(UsageError("bad flag", usage="usage: flutter"))

        assert outcome == UsageFailure(message="bad flag", usage="usage: flutter")
        assert outcome.exit_code == 64

    def test_tool_exit_with_code(self):
        outcome = classify(ToolExit("nope", exit_code=3, hint="try again"))

        assert isinstance(outcome, ControlledExit)
        assert outcome.message == "nope"
        assert outcome.hint == "try again"
        assert outcome.exit_code == 3

    def test_tool_exit_without_code(self):
        outcome = classify(ToolExit("nope"))
        assert outcome.exit_code == 1

    def test_tool_exit_code_zero_is_kept(self):
        assert classify(ToolExit(exit_code=0)).exit_code == 0

    def test_immediate_process_exit(self):
        assert classify(ProcessExit(5, immediate=True)) == ImmediateExit(code=5)

    def test_regular_process_exit(self):
        outcome = classify(ProcessExit(6))

        assert isinstance(outcome, ControlledExit)
        assert outcome.exit_code == 6

    @pytest.mark.parametrize(
        ("payload", "code", "message"),
        [(None, 0, None), (2, 2, None), ("fatal", 1, "fatal")],
    )
    def test_system_exit(self, payload, code, message):
        outcome = classify(SystemExit(payload))

        assert isinstance(outcome, ControlledExit)
        assert outcome.exit_code == code
        assert outcome.message == message

    def test_anything_else_is_a_crash(self):
        error = _raised(KeyError("missing"))
        outcome = classify(error)

        assert isinstance(outcome, Crash)
        assert outcome.error is error
        assert outcome.exit_code == 1
        assert "KeyError" in outcome.stack_trace

    def test_explicit_stack_trace_is_kept(self):
        outcome = classify(RuntimeError("x"), "captured trace")
        assert outcome.stack_trace == "captured trace"


class TestFormatStackTrace:
    def test_includes_traceback(self):
        text = format_stack_trace(_raised(ValueError("bad")))

        assert text.startswith("Traceback (most recent call last):")
        assert text.rstrip().endswith("ValueError: bad")

    def test_without_traceback(self):
        assert format_stack_trace(ValueError("bad")).strip() == "ValueError: bad"


class TestOutcomeCodes:
    def test_success(self):
        assert Success().exit_code == 0

    def test_controlled_exit_default(self):
        assert ControlledExit().exit_code == 1

    def test_outcomes_are_frozen(self):
        outcome = ImmediateExit(code=1)
        with pytest.raises(AttributeError):
            outcome.code = 2  # type: ignore[misc]
