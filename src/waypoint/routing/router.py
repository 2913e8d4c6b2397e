"""Ordered route table with first-match lookup and reverse routing.

Routes are registered during setup and scanned in registration order
on every match. The router keeps no per-request state: ``match`` and
``resolve`` only read the table, so one router can serve any number of
concurrent requests once registration is over.
"""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from waypoint.errors import (
    ConfigurationError,
    DuplicateRouteNameError,
    InvalidRouteSourceError,
    UnknownRouteNameError,
)
from waypoint.routing.compiler import (
    PLACEHOLDER_OPEN,
    build_url,
    compile_pattern,
    compile_raw,
    literal_prefix,
)
from waypoint.routing.match_types import MatchTypeRegistry
from waypoint.routing.route import Route, RouteMatch

logger = logging.getLogger("waypoint.routing")

# (methods, pattern, target) or (methods, pattern, target, name)
type RouteSpec = tuple[str, str, Any] | tuple[str, str, Any, str | None]


class Router:
    """Route table, matcher and URL generator.

    Usage::

        router = Router(base_path="/app")
        router.add_route("GET", "/users/[i:id]", show_user, "user")
        router.add_route("GET|POST", "/users", users)

        match = router.match("/app/users/42", "GET")
        match.target, match.params  # (show_user, {"id": "42"})

        router.resolve("user", {"id": 7})  # "/app/users/7"

    Method matching:
        By default a route matches when the request method occurs
        anywhere in its method string, case-insensitively. That is how
        ``"GET|POST"`` accepts both verbs, and it also means ``"AT"``
        matches a route registered for ``"PATCH"``. Pass
        ``strict_methods=True`` to require the request method to be one
        of the pipe-separated verbs.
    """

    __slots__ = ("_frozen", "_named_routes", "_routes", "base_path", "match_types", "strict_methods")

    def __init__(
        self,
        routes: Iterable[RouteSpec] = (),
        base_path: str = "",
        match_types: Mapping[str, str] | None = None,
        *,
        strict_methods: bool = False,
    ) -> None:
        self._routes: list[Route] = []
        self._named_routes: dict[str, Route] = {}
        self._frozen = False
        self.base_path = base_path
        self.match_types = MatchTypeRegistry(match_types)
        self.strict_methods = strict_methods
        self.add_routes(routes)

    # -- Registration --

    def add_route(
        self,
        methods: str,
        pattern: str,
        target: Any,
        name: str | None = None,
    ) -> Route:
        """Append a route to the table.

        Raises ``DuplicateRouteNameError`` if *name* is already bound;
        the table is unchanged in that case.
        """
        self._check_not_frozen()
        route = Route(methods=methods, pattern=pattern, target=target, name=name or None)

        if route.name is not None:
            if route.name in self._named_routes:
                raise DuplicateRouteNameError(route.name)
            self._named_routes[route.name] = route

        self._routes.append(route)
        logger.debug("Registered %s %s (name=%s)", methods, pattern, route.name)
        return route

    map = add_route

    def add_routes(self, routes: Iterable[RouteSpec]) -> None:
        """Register several routes, in order.

        Each item is ``(methods, pattern, target)`` or
        ``(methods, pattern, target, name)``. Items are added one at a
        time, so a failing item leaves the earlier ones registered.
        """
        if isinstance(routes, (str, bytes, Mapping)) or not isinstance(routes, Iterable):
            msg = f"Routes should be an iterable of route tuples, got {type(routes).__name__}."
            raise InvalidRouteSourceError(msg)
        for spec in routes:
            self.add_route(*spec)

    def set_base_path(self, base_path: str) -> None:
        """Set the prefix stripped from request paths and prepended to URLs."""
        self._check_not_frozen()
        self.base_path = base_path

    def register_match_types(self, match_types: Mapping[str, str]) -> None:
        """Add or override placeholder types (alias -> regex fragment)."""
        self._check_not_frozen()
        self.match_types.register(match_types)

    def freeze(self) -> None:
        """Check every pattern, then forbid further registration.

        Raises ``InvalidRoutePatternError`` for the first pattern that
        does not compile against the final match types; the router stays
        unfrozen in that case. Matching still compiles per request.
        """
        for route in self._routes:
            if route.is_match_all:
                continue
            if route.is_raw_regex:
                compile_raw(route.pattern)
            elif PLACEHOLDER_OPEN in route.pattern:
                compile_pattern(route.pattern, self.match_types)
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in registration order."""
        return tuple(self._routes)

    @property
    def named_routes(self) -> Mapping[str, Route]:
        """Read-only view of routes by name."""
        return MappingProxyType(self._named_routes)

    # -- Reverse routing --

    def resolve(self, name: str, params: Mapping[str, Any] | None = None) -> str:
        """Generate the URL of the route called *name*.

        Raises ``UnknownRouteNameError`` if no route has that name.
        """
        route = self._named_routes.get(name)
        if route is None:
            raise UnknownRouteNameError(name)
        return build_url(route.pattern, params or {}, self.base_path)

    generate = resolve

    # -- Matching --

    def match(self, path: str, method: str = "GET") -> RouteMatch | None:
        """Return the first route matching *method* and *path*, or ``None``.

        *path* is the raw request target: the base path is cut off by
        length and anything from the first ``?`` on is ignored.
        """
        path = path[len(self.base_path) :]
        path, _, _ = path.partition("?")

        for route in self._routes:
            if not self._method_matches(route, method):
                continue

            params = self._match_route(route, path)
            if params is not None:
                logger.debug("%s %s -> %s", method, path, route.pattern)
                return RouteMatch(route=route, params=params)

        logger.debug("%s %s -> no match", method, path)
        return None

    def _method_matches(self, route: Route, method: str) -> bool:
        if self.strict_methods:
            return method.upper() in route.method_set
        return method.lower() in route.methods.lower()

    def _match_route(self, route: Route, path: str) -> dict[str, str] | None:
        """Match one route against an already-stripped path."""
        if route.is_match_all:
            return {}

        if route.is_raw_regex:
            m = compile_raw(route.pattern).search(path)
            if m is None:
                return None
            return {k: v for k, v in m.groupdict().items() if v is not None}

        if PLACEHOLDER_OPEN not in route.pattern:
            return {} if path == route.pattern else None

        # Cheap reject before compiling: the literal head must line up
        prefix = literal_prefix(route.pattern)
        if path[: len(prefix)] != prefix:
            return None

        return compile_pattern(route.pattern, self.match_types).match(path)

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot change the route table after the router is frozen."
            raise ConfigurationError(msg)
