"""Exceptions raised while decoding EDF recordings."""

from __future__ import annotations


class EdfError(Exception):
    """Base class for every decoding failure."""


class InvalidFormatError(EdfError, ValueError):
    """The stream does not start with the EDF version marker."""


class MalformedFieldError(EdfError, ValueError):
    """A fixed-width header field does not hold a usable value."""

    def __init__(self, field: str, raw: str, reason: str = "is not a valid integer") -> None:
        super().__init__(f"Header field {field!r} {reason}: {raw!r}")
        self.field = field
        self.raw = raw


class TruncatedDataError(EdfError, EOFError):
    """The stream ended before a header or data region was fully read."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"Unexpected end of file while reading {what}: expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual


class IOFailureError(EdfError, OSError):
    """Reading or seeking the underlying stream failed."""
