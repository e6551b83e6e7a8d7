"""Exception hierarchy for conninfo parsing and rendering."""

from __future__ import annotations

from typing import Optional


class ConninfoError(Exception):
    """Base exception for every failure raised by the package."""


class ParseError(ConninfoError):
    """Raised when a conninfo string cannot be turned into a parameter list."""


class ConninfoSyntaxError(ParseError):
    """Raised for malformed input: bad tokens, quotes, escapes or ports."""

    def __init__(self, reason: str, position: Optional[int] = None) -> None:
        self.reason = reason
        self.position = position
        if position is None:
            message = reason
        else:
            message = f"{reason} (at position {position})"
        super().__init__(message)


class UnknownKeywordError(ParseError):
    """Raised when a decoded keyword is not in the keyword registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'invalid connection option "{name}"')


class RendererUnavailableError(ConninfoError):
    """Raised when an output mode is requested that this build cannot render."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(f"{mode} output not available")


__all__ = [
    "ConninfoError",
    "ParseError",
    "ConninfoSyntaxError",
    "UnknownKeywordError",
    "RendererUnavailableError",
]
