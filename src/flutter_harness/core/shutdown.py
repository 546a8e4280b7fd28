"""Shutdown hooks and the ordered shutdown sequence.

:class:`ShutdownSequencer` runs once per invocation, after the outcome
is resolved:

1. show the telemetry welcome notice (idempotent);
2. flush telemetry, bounded by :data:`TELEMETRY_FLUSH_BUDGET`;
3. run shutdown hooks in registration order;
4. yield to the event loop once so queued callbacks can run;
5. call the exit primitive with the resolved code.

``ImmediateExit`` outcomes bypass all of this via
:meth:`ShutdownSequencer.exit_immediately`.
"""

from __future__ import annotations

import asyncio
import inspect
import sys
import time
from collections.abc import Callable
from typing import Any

from flutter_harness.core.protocols import ShutdownHook, TelemetryClient
from flutter_harness.exceptions import ShutdownStateError
from flutter_harness.utils.logger import get_logger

logger = get_logger(__name__)

TELEMETRY_FLUSH_BUDGET: float = 0.25
"""Seconds to wait for pending telemetry before moving on."""

ExitProcess = Callable[[int], Any]


class ShutdownHooks:
    """Registry of cleanup callbacks, drained once at shutdown."""

    def __init__(self) -> None:
        self._hooks: list[ShutdownHook] = []
        self._ran: bool = False

    def __len__(self) -> int:
        return len(self._hooks)

    @property
    def ran(self) -> bool:
        return self._ran

    def add_shutdown_hook(self, hook: ShutdownHook) -> None:
        """Register *hook*.  Hooks may be sync or return an awaitable."""
        if self._ran:
            raise ShutdownStateError(
                "Shutdown hooks have already run; cannot register more.",
            )
        self._hooks.append(hook)

    async def run_shutdown_hooks(self) -> None:
        """Run every hook in registration order.

        A failing hook is logged and does not stop the remaining hooks.
        Calling this a second time does nothing.
        """
        if self._ran:
            return
        self._ran = True
        logger.debug("Running shutdown hooks", count=len(self._hooks))
        for hook in self._hooks:
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(
                    "Shutdown hook failed",
                    hook=getattr(hook, "__qualname__", repr(hook)),
                    error=repr(exc),
                )
        logger.debug("Shutdown hooks complete")


class ShutdownSequencer:
    """Drives the ordered, best-effort shutdown for one invocation.

    Parameters
    ----------
    telemetry:
        Telemetry accumulator to greet with and flush.
    hooks:
        Registry of shutdown callbacks.
    exit_process:
        The process-termination primitive.  Defaults to :func:`sys.exit`;
        tests inject a recorder that returns instead of raising.
    flush_budget:
        Upper bound, in seconds, on the telemetry flush.
    """

    def __init__(
        self,
        telemetry: TelemetryClient,
        hooks: ShutdownHooks,
        *,
        exit_process: ExitProcess = sys.exit,
        flush_budget: float = TELEMETRY_FLUSH_BUDGET,
    ) -> None:
        self._telemetry = telemetry
        self._hooks = hooks
        self._exit_process = exit_process
        self._flush_budget = flush_budget
        self._done: bool = False

    @property
    def done(self) -> bool:
        return self._done

    async def exit(self, code: int) -> int:
        """Run the full shutdown sequence and terminate with *code*."""
        self._claim()

        self._telemetry.print_welcome()

        if self._telemetry.enabled:
            await self._flush_telemetry()

        await self._hooks.run_shutdown_hooks()

        # One pass through the event loop so trailing writes get out.
        await asyncio.sleep(0)

        logger.debug("Exiting", code=code)
        self._exit_process(code)
        return code

    def exit_immediately(self, code: int) -> int:
        """Terminate with *code*, skipping every shutdown step."""
        self._claim()
        logger.debug("Exiting immediately", code=code)
        self._exit_process(code)
        return code

    def _claim(self) -> None:
        if self._done:
            raise ShutdownStateError("The shutdown sequence has already run.")
        self._done = True

    async def _flush_telemetry(self) -> None:
        started = time.monotonic()
        try:
            await asyncio.wait_for(
                self._telemetry.ensure_sent(),
                timeout=self._flush_budget,
            )
        except asyncio.TimeoutError:
            logger.debug("Telemetry flush exceeded budget", budget=self._flush_budget)
        except Exception as exc:
            logger.debug("Telemetry flush failed", error=repr(exc))
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.debug("ensure_sent", elapsed_ms=elapsed_ms)
