"""Renderers turning a :class:`ParameterList` into text.

None of these parse anything; they only serialise resolved parameters.
"""

from __future__ import annotations

import json
from typing import Callable, Dict, Iterable, List

from conninfo_parse.domain.entities import ResolvedParam
from conninfo_parse.domain.errors import RendererUnavailableError

DEFAULT_DELIMITER = "\t"


def escape_shell_arg(value: str) -> str:
    """Quote ``value`` for safe use as a POSIX shell word.

    The value is wrapped in single quotes and every embedded single quote
    becomes ``'\\''``.
    """

    parts: List[str] = ["'"]
    for ch in value:
        if ch == "'":
            parts.append("'\\''")
        else:
            parts.append(ch)
    parts.append("'")
    return "".join(parts)


def quote_conninfo_value(value: str) -> str:
    """Quote ``value`` for a ``keyword=value`` conninfo string when needed."""

    if value and not any(ch.isspace() or ch in "'\\" for ch in value):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _lines(lines: Iterable[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


def render_delimited(params: Iterable[ResolvedParam], delimiter: str = DEFAULT_DELIMITER) -> str:
    """One ``keyword<delimiter>value`` row per parameter."""

    return _lines(f"{param.keyword}{delimiter}{param.value}" for param in params)


def render_shell(params: Iterable[ResolvedParam]) -> str:
    """One ``keyword='value'`` shell assignment per parameter."""

    return _lines(f"{param.keyword}={escape_shell_arg(param.value)}" for param in params)


def render_json(params: Iterable[ResolvedParam]) -> str:
    """A single JSON object mapping keywords to values."""

    return json.dumps({param.keyword: param.value for param in params}) + "\n"


def render_conninfo(params: Iterable[ResolvedParam]) -> str:
    """Serialise back to ``keyword=value`` form; parsing the result yields the same values."""

    return " ".join(f"{param.keyword}={quote_conninfo_value(param.value)}" for param in params)


Renderer = Callable[..., str]

RENDERERS: Dict[str, Renderer] = {
    "delimited": render_delimited,
    "shell": render_shell,
    "json": render_json,
}


def get_renderer(mode: str) -> Renderer:
    try:
        return RENDERERS[mode]
    except KeyError:
        raise RendererUnavailableError(mode) from None


__all__ = [
    "DEFAULT_DELIMITER",
    "escape_shell_arg",
    "quote_conninfo_value",
    "render_delimited",
    "render_shell",
    "render_json",
    "render_conninfo",
    "RENDERERS",
    "get_renderer",
]
