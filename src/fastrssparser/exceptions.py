from __future__ import annotations

from typing import Optional


class ParseError(ValueError):
    """Base class for every error that aborts a feed parse."""


class StructuralMismatch(ParseError):
    """The current event does not have the expected kind or tag name."""

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class UnderlyingStreamError(ParseError):
    """Malformed XML, empty input or a premature end of the document."""


class MissingChannel(ParseError):
    """The document root closed without ever containing a channel element."""


class InvalidDateFormat(ValueError):
    """A date string could not be parsed. Never fatal to a feed parse."""
