"""Registry of the connection keywords understood by the parser.

Each keyword may carry a compiled-in default and the name of the environment
variable consulted when the conninfo string does not set it. The table order
is significant: the resolver appends environment and default values in this
order.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class KeywordSpec:
    """A recognised connection keyword."""

    name: str
    default: Optional[str] = None
    env_var: Optional[str] = None


_KEYWORD_TABLE: Tuple[KeywordSpec, ...] = (
    KeywordSpec("service", env_var="PGSERVICE"),
    KeywordSpec("user", env_var="PGUSER"),
    KeywordSpec("password", env_var="PGPASSWORD"),
    KeywordSpec("passfile", env_var="PGPASSFILE"),
    KeywordSpec("channel_binding", default="prefer", env_var="PGCHANNELBINDING"),
    KeywordSpec("connect_timeout", env_var="PGCONNECT_TIMEOUT"),
    KeywordSpec("dbname", env_var="PGDATABASE"),
    KeywordSpec("host", env_var="PGHOST"),
    KeywordSpec("hostaddr", env_var="PGHOSTADDR"),
    KeywordSpec("port", default="5432", env_var="PGPORT"),
    KeywordSpec("client_encoding", env_var="PGCLIENTENCODING"),
    KeywordSpec("options", env_var="PGOPTIONS"),
    KeywordSpec("application_name", env_var="PGAPPNAME"),
    KeywordSpec("fallback_application_name"),
    KeywordSpec("keepalives"),
    KeywordSpec("keepalives_idle"),
    KeywordSpec("keepalives_interval"),
    KeywordSpec("keepalives_count"),
    KeywordSpec("tcp_user_timeout"),
    KeywordSpec("sslmode", default="prefer", env_var="PGSSLMODE"),
    KeywordSpec("sslnegotiation", default="postgres", env_var="PGSSLNEGOTIATION"),
    KeywordSpec("sslcompression", default="0", env_var="PGSSLCOMPRESSION"),
    KeywordSpec("sslcert", env_var="PGSSLCERT"),
    KeywordSpec("sslkey", env_var="PGSSLKEY"),
    KeywordSpec("sslcertmode", default="allow", env_var="PGSSLCERTMODE"),
    KeywordSpec("sslpassword"),
    KeywordSpec("sslrootcert", env_var="PGSSLROOTCERT"),
    KeywordSpec("sslcrl", env_var="PGSSLCRL"),
    KeywordSpec("sslcrldir", env_var="PGSSLCRLDIR"),
    KeywordSpec("sslsni", default="1", env_var="PGSSLSNI"),
    KeywordSpec("requirepeer", env_var="PGREQUIREPEER"),
    KeywordSpec("require_auth", env_var="PGREQUIREAUTH"),
    KeywordSpec("ssl_min_protocol_version", default="TLSv1.2", env_var="PGSSLMINPROTOCOLVERSION"),
    KeywordSpec("ssl_max_protocol_version", env_var="PGSSLMAXPROTOCOLVERSION"),
    KeywordSpec("gssencmode", default="prefer", env_var="PGGSSENCMODE"),
    KeywordSpec("krbsrvname", default="postgres", env_var="PGKRBSRVNAME"),
    KeywordSpec("gsslib", env_var="PGGSSLIB"),
    KeywordSpec("gssdelegation", default="0", env_var="PGGSSDELEGATION"),
    KeywordSpec("replication"),
    KeywordSpec("target_session_attrs", default="any", env_var="PGTARGETSESSIONATTRS"),
    KeywordSpec("load_balance_hosts", default="disable", env_var="PGLOADBALANCEHOSTS"),
)

REGISTRY: Mapping[str, KeywordSpec] = MappingProxyType(
    {spec.name: spec for spec in _KEYWORD_TABLE}
)


def lookup(name: str) -> Optional[KeywordSpec]:
    """Return the :class:`KeywordSpec` for ``name`` or ``None`` when unknown."""

    return REGISTRY.get(name)


def is_known(name: str) -> bool:
    return name in REGISTRY


def keywords() -> Tuple[KeywordSpec, ...]:
    """Return every registered keyword in registry order."""

    return _KEYWORD_TABLE


__all__ = ["KeywordSpec", "REGISTRY", "lookup", "is_known", "keywords"]
