"""Failure-capturing boundary around a dispatched command.

The boundary observes two kinds of failure:

* **prompt** — raised by the command coroutine itself;
* **deferred** — raised by background work the command started but did
  not await, delivered through :meth:`FailureBoundary.deliver`.  Tasks
  created with :meth:`FailureBoundary.spawn` deliver automatically, and
  while the boundary is installed it is also the event loop's exception
  handler, so failures of untracked tasks arrive here too.

Only the first failure is recorded.  Everything after it, and anything
arriving once :meth:`FailureBoundary.run` has returned, is consumed and
logged at debug level so it can neither replace the original cause nor
surface as an unhandled-task warning.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any

from flutter_harness.core.classifier import format_stack_trace
from flutter_harness.exceptions import ProcessExit, ShutdownStateError
from flutter_harness.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CapturedFailure:
    """The first failure observed by a boundary."""

    error: BaseException
    stack_trace: str
    deferred: bool = False


async def _invoke(body: Callable[[], Awaitable[None]]) -> None:
    # SystemExit escaping a task would tear down the event loop, so it
    # is turned into a regular exit request here.
    try:
        await body()
    except SystemExit as exc:
        raise ProcessExit.from_system_exit(exc) from exc


class FailureBoundary:
    """Single-use, first-failure-wins capture around one command run."""

    def __init__(self) -> None:
        self._first: CapturedFailure | None = None
        self._sealed: bool = False
        self._started: bool = False
        self._deferred_signal: asyncio.Future[None] | None = None
        self._installed: bool = False
        self._tasks: set[asyncio.Task[Any]] = set()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def first_failure(self) -> CapturedFailure | None:
        return self._first

    @property
    def sealed(self) -> bool:
        """``True`` once the outcome has been resolved."""
        return self._sealed

    # ------------------------------------------------------------------
    # Side channel
    # ------------------------------------------------------------------

    def deliver(self, error: BaseException) -> None:
        """Report a failure from work that outlived its caller."""
        self._capture(error, deferred=True)

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        *,
        name: str | None = None,
    ) -> asyncio.Task[Any]:
        """Start *coro* in the background with its failure routed here."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    # ------------------------------------------------------------------
    # Main entry
    # ------------------------------------------------------------------

    async def run(
        self,
        body: Callable[[], Awaitable[None]],
    ) -> CapturedFailure | None:
        """Run *body* and return the first captured failure, if any.

        Returns as soon as either the body finishes or a deferred
        failure arrives.  In the latter case the body is left running;
        its eventual failure, if any, is consumed.
        """
        if self._started:
            raise ShutdownStateError("A FailureBoundary can only run once.")
        self._started = True

        loop = asyncio.get_running_loop()
        self.install(loop)
        self._deferred_signal = loop.create_future()
        if self._first is not None:
            self._deferred_signal.set_result(None)

        body_task = loop.create_task(_invoke(body), name="harness-command")
        # Registered before asyncio.wait's own callback so that a prompt
        # failure is recorded before wait() returns.
        body_task.add_done_callback(self._on_body_done)

        await asyncio.wait(
            {body_task, self._deferred_signal},
            return_when=asyncio.FIRST_COMPLETED,
        )
        self._sealed = True
        return self._first

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        """Make this boundary the loop's exception handler."""
        if self._installed:
            return
        loop.set_exception_handler(self._handle_loop_exception)
        self._installed = True

    def close(self) -> None:
        """Seal the boundary.

        The loop handler stays installed so that task failures surfacing
        during teardown (garbage-collected tasks, late callbacks) are
        consumed as secondary failures instead of printed.
        """
        self._sealed = True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _capture(self, error: BaseException, *, deferred: bool) -> None:
        if self._first is not None or self._sealed:
            logger.debug(
                "Ignoring secondary failure",
                error=repr(error),
                deferred=deferred,
            )
            return

        self._first = CapturedFailure(
            error=error,
            stack_trace=format_stack_trace(error),
            deferred=deferred,
        )
        signal = self._deferred_signal
        if signal is not None and not signal.done():
            signal.set_result(None)

    def _on_body_done(self, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            self._capture(asyncio.CancelledError(), deferred=False)
            return
        error = task.exception()
        if error is not None:
            self._capture(error, deferred=False)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.deliver(error)

    def _handle_loop_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: dict[str, Any],
    ) -> None:
        error = context.get("exception")
        if isinstance(error, BaseException):
            self.deliver(error)
            return
        logger.warning("Event loop error", message=context.get("message"))
