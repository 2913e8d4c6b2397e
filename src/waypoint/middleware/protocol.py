"""Middleware protocol and the ``Next`` callable type.

Middleware wraps dispatch::

    def middleware(request: RequestContext, next: Next) -> Response: ...

Global middleware sees every request, matched or not. Middleware added
with a prefix runs only once a route has matched, so ``request.params``
and ``request.route_name`` are already filled in.
"""

from collections.abc import Callable
from typing import Protocol

from waypoint.context import RequestContext
from waypoint.http.response import Response

# Rest of the chain: later middleware, then routing or the handler
type Next = Callable[[RequestContext], Response]


class Middleware(Protocol):
    """Anything callable as ``(request, next) -> Response``.

    Functions and callable objects both qualify::

        def route_header(request: RequestContext, next: Next) -> Response:
            return next(request).with_header("X-Route", request.route_name or "-")

        class RequireToken:
            def __init__(self, token: str) -> None:
                self.token = token

            def __call__(self, request: RequestContext, next: Next) -> Response:
                if request.headers.get("x-token") != self.token:
                    raise HTTPError(status=401, detail="Missing token")
                return next(request)

    Returning without calling ``next`` short-circuits the request.
    """

    def __call__(self, request: RequestContext, next: Next) -> Response: ...
