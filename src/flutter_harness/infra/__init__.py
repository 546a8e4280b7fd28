"""Infrastructure layer — process, file-system and network integration.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core and CLI layers.
"""

from flutter_harness.infra.bot_detector import is_running_on_bot
from flutter_harness.infra.crash_fs import LocalCrashFileSystem
from flutter_harness.infra.crash_sender import CrashReportSender
from flutter_harness.infra.issue_template import IssueTemplateCreator
from flutter_harness.infra.telemetry import Telemetry

__all__: list[str] = [
    "CrashReportSender",
    "IssueTemplateCreator",
    "LocalCrashFileSystem",
    "Telemetry",
    "is_running_on_bot",
]
