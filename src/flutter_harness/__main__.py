"""Allow ``python -m flutter_harness`` invocation.

This module simply delegates to the CLI entry point so that
``python -m flutter_harness`` behaves identically to the console script.
"""

from __future__ import annotations

from flutter_harness.cli.app import cli

if __name__ == "__main__":
    cli()
