"""flutter-harness — top-level execution harness for a command-line tool.

Dispatches sub-commands inside a failure-capturing boundary, classifies
whatever escapes into a small set of outcomes, writes crash reports, and
runs a bounded shutdown sequence before the process exits.
"""

from flutter_harness.version import __version__

__all__: list[str] = ["__version__"]
