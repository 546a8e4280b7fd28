"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) and crash
reporting remain functional even when Rich is not installed.

Two shared proxies are exported: :data:`console` writes errors to
stderr, :data:`status_console` writes status messages to stdout.
"""

from __future__ import annotations

import io
import sys
from typing import Any, TextIO

from flutter_harness.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(
	*,
	stderr: bool = True,
	file: TextIO | None = None,
	no_color: bool = False,
) -> Any:
	"""Create a Rich console for stderr, stdout, or an explicit *file*."""
	console_class = _load_rich_console_class()
	if file is not None:
		return console_class(file=file, no_color=no_color, highlight=False)
	return console_class(stderr=stderr, no_color=no_color, highlight=False)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback.

	Keyword arguments (``style``, ``soft_wrap``, ``markup``...) are
	forwarded to Rich and ignored by the plain fallback.
	"""

	def __init__(
		self,
		*,
		stderr: bool = True,
		file: TextIO | None = None,
		no_color: bool = False,
	) -> None:
		self._stderr = stderr
		self._file = file
		self._no_color = no_color

	def print(self, *objects: object, **kwargs: Any) -> None:
		"""Render with Rich when available, else plain print."""
		try:
			rich_console = get_rich_console(
				stderr=self._stderr,
				file=self._file,
				no_color=self._no_color,
			)
		except EnvironmentError:
			print(*objects, file=self._stream())
			return
		rich_console.print(*objects, **kwargs)

	def _stream(self) -> TextIO:
		if self._file is not None:
			return self._file
		return sys.stderr if self._stderr else sys.stdout


def buffer_console() -> tuple[_ConsoleProxy, io.StringIO]:
	"""Return a colorless console that records into an in-memory buffer."""
	buffer = io.StringIO()
	return _ConsoleProxy(file=buffer, no_color=True), buffer


console = _ConsoleProxy()
status_console = _ConsoleProxy(stderr=False)
