"""Version information for flutter-harness."""

from __future__ import annotations

from importlib import metadata

__version__: str = "0.1.0"

DISTRIBUTION_NAME: str = "flutter-harness"


def get_version_string() -> str:
    """Return the installed distribution version, or :data:`__version__`.

    The installed metadata wins so that editable installs and wheels
    report the version they were built with.
    """
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return __version__
