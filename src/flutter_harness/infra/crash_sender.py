"""Infrastructure: remote crash-collection client.

Uploads one JSON crash report per process to a configured endpoint.
Every failure is logged and dropped — a broken upload must never hide
the crash it was trying to report.
"""

from __future__ import annotations

import platform
from collections.abc import Callable

from flutter_harness.infra.http import post_json
from flutter_harness.utils.logger import get_logger

logger = get_logger(__name__)

SEND_TIMEOUT_SECONDS = 10.0


class CrashReportSender:
    """Best-effort uploader for crash reports.

    Parameters
    ----------
    endpoint:
        Collection URL.  ``None`` disables uploads.
    product:
        Product identifier sent with the report.
    """

    def __init__(self, endpoint: str | None, *, product: str = "flutter") -> None:
        self._endpoint = endpoint
        self._product = product
        self._sent = False

    @property
    def sent(self) -> bool:
        """Whether a report has already been uploaded by this process."""
        return self._sent

    async def send_report(
        self,
        *,
        error: BaseException,
        stack_trace: str,
        get_version: Callable[[], str],
        command: str,
    ) -> None:
        """Upload a crash report; never raises."""
        if self._endpoint is None:
            logger.debug("Crash reporting endpoint not configured")
            return
        if self._sent:
            logger.debug("Crash report already sent; skipping")
            return
        self._sent = True

        try:
            payload = {
                "product": self._product,
                "version": get_version(),
                "osName": platform.system().lower(),
                "osVersion": platform.release(),
                "python": platform.python_version(),
                "type": type(error).__name__,
                "error": str(error),
                "command": command,
                "stackTrace": stack_trace,
            }
            status = await post_json(
                self._endpoint,
                payload,
                timeout=SEND_TIMEOUT_SECONDS,
            )
        except Exception as exc:
            logger.warning("Failed to send crash report", error=repr(exc))
            return

        if 200 <= status < 300:
            logger.debug("Crash report sent", status=status)
        else:
            logger.warning("Crash report rejected", status=status)
