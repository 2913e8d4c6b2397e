"""Explicit application and request context values.

``AppContext`` is built once, when the app freezes, and is read-only
from then on. ``RequestContext`` is built once per inbound request by
``App.dispatch`` and handed to middleware and handlers; nothing in
waypoint reads process-wide request state.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from waypoint.config import AppConfig
from waypoint.http.headers import Headers
from waypoint.http.query import QueryParams
from waypoint.modules import ModuleRegistry

if TYPE_CHECKING:
    from waypoint.routing.route import RouteMatch


@dataclass(frozen=True, slots=True)
class AppContext:
    """Read-only view of app-wide state shared with every request.

    ``shared`` holds the values registered through ``App.set_global``.
    """

    config: AppConfig
    shared: Mapping[str, Any]
    modules: ModuleRegistry

    def get(self, key: str, default: Any = None) -> Any:
        """Return a shared value, or *default* if it was never set."""
        return self.shared.get(key, default)

    def module(self, name: str) -> Any:
        """Return the module registered as *name*, or ``None``."""
        return self.modules.get(name)


@dataclass(frozen=True, slots=True)
class RequestContext:
    """One inbound request, as seen by middleware and handlers.

    ``path`` has the base path and query string removed; ``target`` is
    the request target exactly as the server adapter passed it.
    ``params`` and ``route_name`` are filled in once a route matches.
    """

    method: str
    path: str
    target: str
    query: QueryParams
    headers: Headers
    body: bytes = b""
    params: Mapping[str, str] = field(default_factory=dict)
    route_name: str | None = None
    app: AppContext | None = None

    @classmethod
    def build(
        cls,
        method: str,
        target: str,
        *,
        base_path: str = "",
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
        app: AppContext | None = None,
    ) -> RequestContext:
        """Build a context from the pieces a server adapter extracts."""
        path, _, query_string = target.partition("?")
        return cls(
            method=method.upper(),
            path=path.removeprefix(base_path) or "/",
            target=target,
            query=QueryParams(query_string),
            headers=Headers(headers or {}),
            body=body,
            app=app,
        )

    def with_match(self, match: RouteMatch) -> RequestContext:
        """Return a copy carrying the matched route's params and name."""
        return replace(self, params=dict(match.params), route_name=match.name)

    def param(self, name: str, default: str | None = None) -> str | None:
        """Return a route parameter, or *default* if it did not match."""
        return self.params.get(name, default)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Body parsed as JSON."""
        return json_module.loads(self.body)
