"""Infrastructure: minimal JSON-over-HTTP POST helper.

One short-lived :class:`httpx.AsyncClient` per request.  Callers bound
the wait with :func:`asyncio.wait_for`; cancellation closes the client
and abandons the request.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from flutter_harness.version import __version__

USER_AGENT = f"flutter-harness/{__version__}"


async def post_json(
    url: str,
    payload: Mapping[str, Any],
    *,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """POST *payload* as JSON to *url* and return the HTTP status code.

    Raises
    ------
    httpx.HTTPError
        On connection failures and timeouts.
    """
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": USER_AGENT},
        transport=transport,
    ) as client:
        response = await client.post(url, json=dict(payload))
    return response.status_code
