"""Route, Placeholder and RouteMatch frozen dataclasses."""

from dataclasses import dataclass
from typing import Any

# Pattern that matches every path
MATCH_ALL = "*"

# Prefix marking a route whose pattern is a ready-made regular expression
RAW_REGEX_PREFIX = "@"


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A bracketed token parsed from a route pattern.

    ``/[i:id]?`` -> ``Placeholder(block="/[i:id]?", separator="/",
    type_alias="i", name="id", optional=True, start=..., end=...)``

    ``start``/``end`` delimit ``block`` in the raw pattern; ``block``
    includes the separator and the trailing ``?``.
    """

    block: str
    separator: str
    type_alias: str
    name: str | None
    optional: bool
    start: int
    end: int

    @property
    def token(self) -> str:
        """The block without its leading separator."""
        return self.block[len(self.separator) :]


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route.

    ``methods`` is kept exactly as registered: a pipe-delimited string
    such as ``"GET|POST"``.
    """

    methods: str
    pattern: str
    target: Any
    name: str | None = None

    @property
    def method_set(self) -> frozenset[str]:
        """The registered methods as an upper-cased set."""
        return frozenset(m.strip().upper() for m in self.methods.split("|") if m.strip())

    @property
    def is_match_all(self) -> bool:
        return self.pattern == MATCH_ALL

    @property
    def is_raw_regex(self) -> bool:
        return self.pattern.startswith(RAW_REGEX_PREFIX)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    params: dict[str, str]

    @property
    def target(self) -> Any:
        return self.route.target

    @property
    def name(self) -> str | None:
        return self.route.name
