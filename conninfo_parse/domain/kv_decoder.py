"""Decoder for the ``keyword=value`` conninfo syntax.

Tokens are separated by ASCII whitespace. A value is either unquoted and runs up to
the next whitespace, or wrapped in single quotes. In both forms ``\\'`` and
``\\\\`` are the only escape sequences; a backslash before anything else is
kept as-is.
"""

from __future__ import annotations

from typing import List, Tuple

from conninfo_parse.domain import logging as domain_logging
from conninfo_parse.domain.entities import RawPair
from conninfo_parse.domain.errors import ConninfoSyntaxError

_ESCAPABLE = ("'", "\\")

# Token separators. Other Unicode spaces are ordinary value characters.
_WHITESPACE = frozenset(" \t\n\r\f\v")


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def _token_at(text: str, pos: int) -> str:
    end = pos
    while end < len(text) and text[end] not in _WHITESPACE:
        end += 1
    return text[pos:end]


def _read_unquoted(text: str, pos: int) -> Tuple[str, int]:
    chars: List[str] = []
    while pos < len(text) and text[pos] not in _WHITESPACE:
        ch = text[pos]
        if ch == "\\" and pos + 1 < len(text) and text[pos + 1] in _ESCAPABLE:
            chars.append(text[pos + 1])
            pos += 2
            continue
        chars.append(ch)
        pos += 1
    return "".join(chars), pos


def _read_quoted(text: str, pos: int) -> Tuple[str, int]:
    opening = pos
    pos += 1
    chars: List[str] = []
    while True:
        if pos >= len(text):
            raise ConninfoSyntaxError(
                f'unterminated quoted string in connection info string: "{text[opening:]}"',
                opening,
            )
        ch = text[pos]
        if ch == "\\" and pos + 1 < len(text) and text[pos + 1] in _ESCAPABLE:
            chars.append(text[pos + 1])
            pos += 2
            continue
        pos += 1
        if ch == "'":
            break
        chars.append(ch)

    if pos < len(text) and text[pos] not in _WHITESPACE:
        raise ConninfoSyntaxError(
            f'unexpected "{_token_at(text, pos)}" after quoted value in connection info string',
            pos,
        )
    return "".join(chars), pos


def decode_kv(conninfo: str) -> List[RawPair]:
    """Split a ``keyword=value`` conninfo string into :class:`RawPair` objects.

    Keywords are returned verbatim and in input order; checking them against
    the keyword registry is left to the resolver.
    """

    pairs: List[RawPair] = []
    pos = _skip_whitespace(conninfo, 0)

    while pos < len(conninfo):
        start = pos
        while pos < len(conninfo) and conninfo[pos] != "=" and conninfo[pos] not in _WHITESPACE:
            pos += 1
        keyword = conninfo[start:pos]

        if pos >= len(conninfo) or conninfo[pos] != "=":
            raise ConninfoSyntaxError(
                f'missing "=" after "{keyword}" in connection info string', start
            )
        if not keyword:
            raise ConninfoSyntaxError(
                f'missing keyword before "{_token_at(conninfo, start)}" in connection info string',
                start,
            )

        pos += 1
        if pos < len(conninfo) and conninfo[pos] == "'":
            value, pos = _read_quoted(conninfo, pos)
        else:
            value, pos = _read_unquoted(conninfo, pos)

        pairs.append(RawPair(keyword, value))
        pos = _skip_whitespace(conninfo, pos)

    domain_logging.debug(f"Decoded {len(pairs)} keyword/value pair(s).", tag="KV")
    return pairs


__all__ = ["decode_kv"]
