"""Top-level package for the EDF header and sample decoder."""

from .edf import __version__

__license__ = "GPL-3.0-only"

__all__ = ["__version__", "__license__"]
