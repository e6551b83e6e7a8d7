"""Entry point tying the decoders and the resolver together."""

from __future__ import annotations

from typing import List, Mapping, Optional

from conninfo_parse.domain.entities import ParameterList, RawPair
from conninfo_parse.domain.kv_decoder import decode_kv
from conninfo_parse.domain.resolver import resolve
from conninfo_parse.domain.uri_decoder import decode_uri, is_uri
from conninfo_parse.infrastructure import log_utils


def decode(conninfo: str) -> List[RawPair]:
    """Pick the decoder matching ``conninfo``'s syntax and run it."""

    if is_uri(conninfo):
        log_utils.debug("Decoding conninfo as URI.", tag="PARSE")
        return decode_uri(conninfo)
    log_utils.debug("Decoding conninfo as keyword/value pairs.", tag="PARSE")
    return decode_kv(conninfo)


def parse_conninfo(
    conninfo: str,
    env: Optional[Mapping[str, str]] = None,
    *,
    use_environment: bool = True,
    use_defaults: bool = True,
) -> ParameterList:
    """Parse ``conninfo`` and resolve it into a :class:`ParameterList`.

    Raises :class:`~conninfo_parse.domain.errors.ConninfoSyntaxError` for
    malformed input and :class:`~conninfo_parse.domain.errors.UnknownKeywordError`
    for keywords missing from the registry. Nothing is returned on failure.
    """

    pairs = decode(conninfo)
    return resolve(
        pairs,
        env,
        use_environment=use_environment,
        use_defaults=use_defaults,
    )


__all__ = ["decode", "parse_conninfo"]
