"""
Version information for the OpNotes application.
"""

# Standard library imports
import os
from importlib.metadata import PackageNotFoundError, version

# Used when running from a source checkout that was never installed
FALLBACK_VERSION = "1.0.0"


def get_version():
    """
    Returns the application version.

    A VERSION environment variable (set by release builds) wins over the
    installed package metadata.
    """
    if os.environ.get("VERSION"):
        return os.environ["VERSION"]
    try:
        return version("opnotes")
    except PackageNotFoundError:
        return FALLBACK_VERSION


VERSION = get_version()
