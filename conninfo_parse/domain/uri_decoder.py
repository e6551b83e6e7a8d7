"""Decoder for ``postgresql://`` connection URIs.

Shape of the accepted input::

    postgresql://[user[:password]@][host][:port][,host2[:port2]...][/dbname][?key=value[&key=value...]]

Every component is percent-decoded. Pairs come out in fixed slot order: user,
password, host, port, dbname, followed by the query parameters as written.
"""

from __future__ import annotations

import string
from typing import List, Tuple

from conninfo_parse.domain import logging as domain_logging
from conninfo_parse.domain.entities import RawPair
from conninfo_parse.domain.errors import ConninfoSyntaxError

URI_PREFIXES: Tuple[str, ...] = ("postgresql://", "postgres://")
MAX_PORT = 65535

_HEX_DIGITS = frozenset(string.hexdigits)
_ASCII_DIGITS = frozenset(string.digits)


def is_uri(conninfo: str) -> bool:
    """Return ``True`` when ``conninfo`` uses one of the URI schemes."""

    return conninfo.startswith(URI_PREFIXES)


def percent_decode(text: str, offset: int = 0) -> str:
    """Decode ``%XX`` escapes in ``text`` as UTF-8.

    ``offset`` is the position of ``text`` inside the full conninfo string and
    is only used to report error positions.
    """

    if "%" not in text:
        return text

    buffer = bytearray()
    index = 0
    while index < len(text):
        ch = text[index]
        if ch != "%":
            buffer.extend(ch.encode("utf-8"))
            index += 1
            continue

        digits = text[index + 1 : index + 3]
        if len(digits) != 2 or not all(d in _HEX_DIGITS for d in digits):
            raise ConninfoSyntaxError(
                f'invalid percent-encoded token: "{text}"', offset + index
            )
        byte = int(digits, 16)
        if byte == 0:
            raise ConninfoSyntaxError(
                f'forbidden value %00 in percent-encoded value: "{text}"', offset + index
            )
        buffer.append(byte)
        index += 3

    try:
        return buffer.decode("utf-8")
    except UnicodeDecodeError:
        raise ConninfoSyntaxError(
            f'percent-encoded value is not valid UTF-8: "{text}"', offset
        ) from None


def _check_port(port: str, position: int) -> None:
    if not all(ch in _ASCII_DIGITS for ch in port) or int(port) > MAX_PORT:
        raise ConninfoSyntaxError(f'invalid port number: "{port}"', position)


def _decode_userinfo(conninfo: str, start: int, end: int) -> List[RawPair]:
    userinfo = conninfo[start:end]
    user_text, sep, password_text = userinfo.partition(":")

    pairs: List[RawPair] = []
    user = percent_decode(user_text, start)
    if user:
        pairs.append(RawPair("user", user))
    if sep:
        password = percent_decode(password_text, start + len(user_text) + 1)
        if password:
            pairs.append(RawPair("password", password))
    return pairs


def _decode_hosts(conninfo: str, start: int, end: int) -> List[RawPair]:
    hosts: List[str] = []
    ports: List[str] = []
    pos = start

    while True:
        if pos < end and conninfo[pos] == "[":
            closing = conninfo.find("]", pos, end)
            if closing < 0:
                raise ConninfoSyntaxError(
                    f'missing "]" in IPv6 host address in URI: "{conninfo[pos:end]}"', pos
                )
            if closing == pos + 1:
                raise ConninfoSyntaxError("IPv6 host address may not be empty in URI", pos)
            hosts.append(percent_decode(conninfo[pos + 1 : closing], pos + 1))
            pos = closing + 1
            if pos < end and conninfo[pos] not in ":,":
                raise ConninfoSyntaxError(
                    f'unexpected character "{conninfo[pos]}" after IPv6 host address in URI',
                    pos,
                )
        else:
            host_end = pos
            while host_end < end and conninfo[host_end] not in ":,":
                host_end += 1
            hosts.append(percent_decode(conninfo[pos:host_end], pos))
            pos = host_end

        port = ""
        if pos < end and conninfo[pos] == ":":
            pos += 1
            port_end = pos
            while port_end < end and conninfo[port_end] != ",":
                port_end += 1
            port = percent_decode(conninfo[pos:port_end], pos)
            if port:
                _check_port(port, pos)
            pos = port_end
        ports.append(port)

        if pos < end and conninfo[pos] == ",":
            pos += 1
            continue
        break

    pairs: List[RawPair] = []
    if any(hosts):
        pairs.append(RawPair("host", ",".join(hosts)))
    if any(ports):
        pairs.append(RawPair("port", ",".join(ports)))
    return pairs


def _decode_query(conninfo: str, start: int) -> List[RawPair]:
    query = conninfo[start:]
    extra = query.find("?")
    if extra >= 0:
        raise ConninfoSyntaxError(
            f'unexpected "?" in URI query string: "{query}"', start + extra
        )

    pairs: List[RawPair] = []
    offset = start
    for item in query.split("&"):
        item_start = offset
        offset += len(item) + 1
        if not item:
            continue

        key_text, sep, value_text = item.partition("=")
        if not sep:
            raise ConninfoSyntaxError(
                f'missing key/value separator "=" in URI query parameter: "{item}"',
                item_start,
            )
        if "=" in value_text:
            raise ConninfoSyntaxError(
                f'extra key/value separator "=" in URI query parameter: "{item}"',
                item_start + len(key_text) + 1 + value_text.index("="),
            )
        if not key_text:
            raise ConninfoSyntaxError(
                f'missing key in URI query parameter: "{item}"', item_start
            )

        key = percent_decode(key_text, item_start)
        value = percent_decode(value_text, item_start + len(key_text) + 1)
        # JDBC-style flag understood by libpq as well.
        if key == "ssl" and value == "true":
            key, value = "sslmode", "require"
        pairs.append(RawPair(key, value))
    return pairs


def decode_uri(conninfo: str) -> List[RawPair]:
    """Split a connection URI into :class:`RawPair` objects.

    Unknown query keys are passed through untouched so that the resolver can
    reject them against the keyword registry.
    """

    prefix = next((p for p in URI_PREFIXES if conninfo.startswith(p)), None)
    if prefix is None:
        raise ConninfoSyntaxError(f'invalid URI prefix in "{conninfo}"', 0)

    start = len(prefix)
    authority_end = start
    while authority_end < len(conninfo) and conninfo[authority_end] not in "/?":
        authority_end += 1

    pairs: List[RawPair] = []
    host_start = start
    at_sign = conninfo.find("@", start, authority_end)
    if at_sign >= 0:
        pairs.extend(_decode_userinfo(conninfo, start, at_sign))
        host_start = at_sign + 1

    pairs.extend(_decode_hosts(conninfo, host_start, authority_end))

    pos = authority_end
    if pos < len(conninfo) and conninfo[pos] == "/":
        db_start = pos + 1
        db_end = conninfo.find("?", db_start)
        if db_end < 0:
            db_end = len(conninfo)
        dbname = percent_decode(conninfo[db_start:db_end], db_start)
        if dbname:
            pairs.append(RawPair("dbname", dbname))
        pos = db_end

    if pos < len(conninfo) and conninfo[pos] == "?":
        pairs.extend(_decode_query(conninfo, pos + 1))

    domain_logging.debug(f"Decoded {len(pairs)} URI component(s).", tag="URI")
    return pairs


__all__ = ["URI_PREFIXES", "MAX_PORT", "is_uri", "percent_decode", "decode_uri"]
