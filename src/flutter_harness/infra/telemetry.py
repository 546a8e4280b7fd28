"""Infrastructure: in-process telemetry accumulator.

Events are queued in memory over the life of the process and drained
once, at shutdown, by :meth:`Telemetry.ensure_sent`.  When no endpoint
is configured the queue is simply discarded.

Rules
-----
* Never raises from ``send_*`` or ``print_welcome``.
* The shutdown sequencer owns the time budget for the flush.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from flutter_harness.infra.http import post_json
from flutter_harness.utils.logger import get_logger

logger = get_logger(__name__)

WELCOME_MARKER = "telemetry_welcome_shown"

WELCOME_MESSAGE = (
    "Welcome! This tool anonymously reports usage statistics and basic\n"
    "crash reports to help improve it. Set FLUTTER_HARNESS_TELEMETRY=false\n"
    "to opt out."
)

SEND_TIMEOUT_SECONDS = 5.0


class Telemetry:
    """Usage/analytics accumulator for one process.

    Parameters
    ----------
    enabled:
        Whether events are collected and flushed at all.
    state_dir:
        Directory holding the "welcome shown" marker.  ``None`` keeps
        the marker in memory only.
    endpoint:
        URL that queued events are POSTed to on flush.
    suppress_welcome:
        Never show the welcome notice (e.g. on CI).
    emit:
        Callable that displays the welcome notice to the user.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        state_dir: Path | None = None,
        endpoint: str | None = None,
        suppress_welcome: bool = False,
        emit: Callable[[str], None],
    ) -> None:
        self._enabled = enabled
        self._state_dir = state_dir
        self._endpoint = endpoint
        self._suppress_welcome = suppress_welcome
        self._emit = emit
        self._queue: list[dict[str, Any]] = []
        self._welcome_shown = False

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def pending(self) -> tuple[dict[str, Any], ...]:
        """Events queued but not yet flushed."""
        return tuple(self._queue)

    def send_event(self, category: str, action: str, **parameters: Any) -> None:
        """Queue a usage event."""
        if not self._enabled:
            return
        self._queue.append(
            {
                "type": "event",
                "category": category,
                "action": action,
                "timestamp": time.time(),
                **parameters,
            }
        )

    def send_exception(self, error: BaseException) -> None:
        """Queue an exception event (type name only, never the message)."""
        if not self._enabled:
            return
        self._queue.append(
            {
                "type": "exception",
                "exception": type(error).__name__,
                "timestamp": time.time(),
            }
        )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def ensure_sent(self) -> None:
        """Flush queued events to the endpoint, if any.

        The queue is taken before the request starts so a flush that is
        abandoned part-way is never retried.
        """
        events, self._queue = self._queue, []
        if not events or self._endpoint is None:
            return
        try:
            await post_json(
                self._endpoint,
                {"events": events},
                timeout=SEND_TIMEOUT_SECONDS,
            )
        except Exception as exc:
            logger.debug("Telemetry send failed", error=repr(exc))

    def print_welcome(self) -> None:
        """Show the first-run notice once per state directory."""
        if self._welcome_shown or self._suppress_welcome or not self._enabled:
            return
        self._welcome_shown = True

        marker = self._marker_path()
        if marker is not None and marker.exists():
            return

        self._emit(WELCOME_MESSAGE)
        if marker is None:
            return
        try:
            marker.parent.mkdir(parents=True, exist_ok=True)
            marker.touch()
        except OSError as exc:
            logger.debug("Could not record telemetry welcome", error=repr(exc))

    def _marker_path(self) -> Path | None:
        if self._state_dir is None:
            return None
        return self._state_dir / WELCOME_MARKER
