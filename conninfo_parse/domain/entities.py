"""Value objects flowing between the decoders, the resolver and the renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class RawPair:
    """A keyword/value pair exactly as a decoder found it in the input."""

    keyword: str
    value: str


class Source(str, Enum):
    """Where a resolved value came from."""

    EXPLICIT = "explicit"
    ENVIRONMENT = "environment"
    DEFAULT = "default"


@dataclass(frozen=True)
class ResolvedParam:
    """Single entry of a :class:`ParameterList`."""

    keyword: str
    value: str
    source: Source = Source.EXPLICIT


@dataclass(frozen=True)
class ParameterList:
    """Ordered, immutable collection of resolved parameters.

    Holds at most one entry per keyword. Iterating yields
    :class:`ResolvedParam` objects in resolution order.
    """

    params: Tuple[ResolvedParam, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for param in self.params:
            if param.keyword in seen:
                raise ValueError(f"duplicate keyword in parameter list: {param.keyword}")
            seen.add(param.keyword)

    def __iter__(self) -> Iterator[ResolvedParam]:
        return iter(self.params)

    def __len__(self) -> int:
        return len(self.params)

    def __contains__(self, keyword: object) -> bool:
        return any(param.keyword == keyword for param in self.params)

    def get(self, keyword: str) -> Optional[ResolvedParam]:
        for param in self.params:
            if param.keyword == keyword:
                return param
        return None

    def keywords(self) -> List[str]:
        return [param.keyword for param in self.params]

    def as_dict(self) -> Dict[str, str]:
        """Return ``keyword -> value`` preserving order, dropping provenance."""

        return {param.keyword: param.value for param in self.params}

    def pairs(self) -> List[Tuple[str, str]]:
        return [(param.keyword, param.value) for param in self.params]


__all__ = ["RawPair", "Source", "ResolvedParam", "ParameterList"]
