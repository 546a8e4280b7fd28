"""Infrastructure: detect automated (CI / bot) environments.

Crash reports are not uploaded and the telemetry welcome is not shown
when the tool runs unattended.

Rules
-----
* Detection from environment variables only — no subprocess.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

BOT_VARIABLES: tuple[str, ...] = (
    "BOT",
    "CI",
    "CONTINUOUS_INTEGRATION",
    "TRAVIS",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "CIRRUS_CI",
    "APPVEYOR",
    "TF_BUILD",
    "BUILDKITE",
    "TEAMCITY_VERSION",
    "CODEBUILD_BUILD_ID",
    "CHROME_HEADLESS",
)
"""Variables whose presence (with a truthy value) marks a CI run."""


def _truthy(value: str) -> bool:
    return value.strip().lower() not in ("", "0", "false", "no", "off")


def is_running_on_bot(environ: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` when the process appears to run on CI.

    Jenkins is recognised by ``BUILD_ID`` together with ``JENKINS_URL``
    because ``BUILD_ID`` alone is too generic.
    """
    env = os.environ if environ is None else environ

    for name in BOT_VARIABLES:
        value = env.get(name)
        if value is not None and _truthy(value):
            return True

    return bool(env.get("BUILD_ID")) and bool(env.get("JENKINS_URL"))
