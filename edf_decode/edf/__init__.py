"""European Data Format (EDF) decoding toolkit."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("edf-decode")
except PackageNotFoundError:  # pragma: no cover - local editable install only
    __version__ = "0.0.0"

__license__ = "GPL-3.0-only"

__all__ = ["__version__", "__license__"]
