"""Infrastructure: the file system used for crash reports only.

Crash reporting gets its own, minimal file access instead of sharing
whatever the rest of the process uses, so that a report can still be
written when that layer is in an inconsistent state.

Rules
-----
* Plain :mod:`pathlib` I/O, synchronous writes.
* Raises :class:`OSError` on failure — callers choose the fallback.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

MAX_UNIQUE_ATTEMPTS = 10_000


class LocalCrashFileSystem:
    """Concrete crash file system backed by the local disk.

    Parameters
    ----------
    current_directory:
        Preferred directory for reports.  Defaults to the process CWD,
        resolved when the report is written rather than at start-up.
    temp_directory:
        Fallback directory.  Defaults to :func:`tempfile.gettempdir`.
    """

    def __init__(
        self,
        current_directory: Path | None = None,
        temp_directory: Path | None = None,
    ) -> None:
        self._current_directory = current_directory
        self._temp_directory = temp_directory

    @property
    def current_directory(self) -> Path:
        if self._current_directory is not None:
            return self._current_directory
        return Path.cwd()

    @property
    def system_temp_directory(self) -> Path:
        if self._temp_directory is not None:
            return self._temp_directory
        return Path(tempfile.gettempdir())

    def unique_file(self, directory: Path, base_name: str, extension: str) -> Path:
        """Return the first unused ``<base_name>_NN.<extension>`` in *directory*.

        Numbering starts at ``01`` and is zero-padded to two digits.
        """
        for index in range(1, MAX_UNIQUE_ATTEMPTS + 1):
            candidate = directory / f"{base_name}_{index:02d}.{extension}"
            if not candidate.exists():
                return candidate
        raise OSError(
            f"No free crash report name for {base_name!r} in {directory}",
        )

    def write_text(self, path: Path, text: str) -> None:
        """Write *text* to *path* synchronously (UTF-8)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
