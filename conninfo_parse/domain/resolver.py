"""Merge decoded pairs with environment fallbacks and compiled-in defaults."""

from __future__ import annotations

import os
from typing import Dict, Iterable, List, Mapping, Optional

from conninfo_parse.domain import keywords
from conninfo_parse.domain import logging as domain_logging
from conninfo_parse.domain.entities import ParameterList, RawPair, ResolvedParam, Source
from conninfo_parse.domain.errors import ConninfoSyntaxError, UnknownKeywordError
from conninfo_parse.domain.uri_decoder import MAX_PORT


def _describe_source(param: ResolvedParam) -> str:
    if param.source is Source.ENVIRONMENT:
        spec = keywords.lookup(param.keyword)
        return f" (from {spec.env_var})"
    return ""


def _check_port_list(param: ResolvedParam) -> None:
    for entry in param.value.split(","):
        if not entry:
            continue
        if not entry.isascii() or not entry.isdigit() or int(entry) > MAX_PORT:
            raise ConninfoSyntaxError(
                f'invalid port number: "{entry}"{_describe_source(param)}'
            )


_VALUE_CHECKS = {
    "port": _check_port_list,
}


def resolve(
    pairs: Iterable[RawPair],
    env: Optional[Mapping[str, str]] = None,
    *,
    use_environment: bool = True,
    use_defaults: bool = True,
) -> ParameterList:
    """Build the final :class:`ParameterList` for ``pairs``.

    Resolution order is explicit pairs (last occurrence wins, first position
    kept), then environment variables, then registry defaults. Environment and
    default values are appended in registry order. Keywords without any value
    are left out; an explicit empty value is kept.

    ``env`` defaults to :data:`os.environ`.
    """

    environ: Mapping[str, str] = os.environ if env is None else env
    resolved: Dict[str, ResolvedParam] = {}

    for pair in pairs:
        if keywords.lookup(pair.keyword) is None:
            raise UnknownKeywordError(pair.keyword)
        resolved[pair.keyword] = ResolvedParam(pair.keyword, pair.value, Source.EXPLICIT)

    explicit_count = len(resolved)

    if use_environment:
        for spec in keywords.keywords():
            if spec.name in resolved or not spec.env_var:
                continue
            env_value = environ.get(spec.env_var)
            if env_value:
                resolved[spec.name] = ResolvedParam(spec.name, env_value, Source.ENVIRONMENT)

    environment_count = len(resolved) - explicit_count

    if use_defaults:
        for spec in keywords.keywords():
            if spec.name in resolved or spec.default is None:
                continue
            resolved[spec.name] = ResolvedParam(spec.name, spec.default, Source.DEFAULT)

    for keyword, check in _VALUE_CHECKS.items():
        param = resolved.get(keyword)
        if param is not None:
            check(param)

    domain_logging.debug(
        f"Resolved {len(resolved)} parameter(s): {explicit_count} explicit, "
        f"{environment_count} from environment, "
        f"{len(resolved) - explicit_count - environment_count} default.",
        tag="RESOLVE",
    )
    params: List[ResolvedParam] = list(resolved.values())
    return ParameterList(tuple(params))


__all__ = ["resolve"]
